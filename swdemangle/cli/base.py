# -*- coding: UTF-8 -*-

from swdemangle.utility import Logging as log


def AllSubClasses(cls):
    """ get all subclesses recusive """
    all_cls = {}
    ordered_cls = []

    def AddClass(cls):
        if cls not in all_cls:
            all_cls[cls] = 1
            ordered_cls.append(cls)

    def WalkClass(cls):
        subcls = cls.__subclasses__()
        for c in subcls:
            AddClass(c)

        # recursive
        for c in subcls:
            WalkClass(c)

    WalkClass(cls)
    return ordered_cls


class CommandsDispatcher(object):
    """ a tree of commands keyed by the words of their '_cxpr'.

        [symbol]
        [type]
        [config]
        [set]

        a word selects the command with the same name, or the only
        command it is a prefix of. the remaining words are handed to
        the 'invoke' function of the command found.
    """
    _I_top = [None, {}]

    @classmethod
    def WalkSubCommands(cls, ds):
        for key in sorted(ds[1]):
            cmd = ds[1][key][0]
            yield key, cmd

    @classmethod
    def ShowCommandHelp(cls, ds):
        if ds[0] is not None:
            print(ds[0].Help())

        if len(ds[1]) > 0:
            print("Commands,")
            for key, cmd in cls.WalkSubCommands(ds):
                if cmd is None:
                    title = "See '... %s ?'" % key
                else:
                    title = cmd.Title()
                print("  %-12s -- %s" % (key, title))

    @classmethod
    def ShowCommandList(cls, ds, word=''):
        out = []
        for key in sorted(ds[1]):
            if key.startswith(word):
                out.append(key)
        print(" ".join(out))

    @classmethod
    def Register(cls, pyo_cmd):
        """ register command object to tree.
            ds[0] holds the command object,
            ds[1] are subcommands in dict().
        """
        cxy = pyo_cmd._cxpr.split(' ')
        ds = cls._I_top
        for i in cxy:
            if i not in ds[1]:
                ds[1][i] = [None, {}]
            ds = ds[1][i]
        ds[0] = pyo_cmd
        log.debug("command '%s' registered." % (pyo_cmd._cxpr))

    @classmethod
    def Dispatch(cls, argv):
        """ find the command object match the input,
            dispatch the input to user invoke function,
            or an error message poped if not found.

            return True if a command was invoked.
        """
        ds = cls._I_top

        last = 0
        for i in range(len(argv)):
            word = argv[i]
            conf = []

            # '?' give the user all sub commands
            if word == '?':
                cls.ShowCommandHelp(ds)
                return True

            # parse the word
            for a in ds[1]:
                if a == word:
                    ds = ds[1][a]
                    last = i + 1
                    conf = []
                    break
                elif a.startswith(word):
                    conf.append([ds[1][a], i + 1])

            # what we find only match
            if len(conf) == 1:
                ds = conf[0][0]
                last = conf[0][1]

            # more than 1
            elif len(conf) > 1:
                print("'%s' is an ambiguous command, candidate list:" % (word))
                cls.ShowCommandList(ds, word)
                return False

            # not a command word
            elif last != i + 1:
                break

            # arguments of the command follow
            if ds[0] is not None:
                break

        if ds[0] is not None:
            if argv[last:last + 1] == ["?"]:
                cls.ShowCommandHelp(ds)
                return True
            cmd = ds[0]
            cmd.invoke(argv[last:])
            return True

        if len(argv) == 0:
            cls.ShowCommandHelp(ds)
            return True

        log.error("error: '%s' is not a valid command." % " ".join(argv))
        return False


class Command(object):
    """ Register User-defined Command
    """

    # command line express
    _cxpr = None

    # __doc__ as help string

    @classmethod
    def RegisterAll(cls):
        all_cmds = sorted(AllSubClasses(cls), key=lambda c: c._cxpr)
        for c in all_cmds:
            CommandsDispatcher.Register(c())

    def Title(self):
        if self.__doc__:
            # get first line of docstring as title
            return self.__doc__.splitlines()[0].strip()
        return ""

    def Help(self):
        if self.__doc__:
            return self.__doc__.strip()
        return "This command is not documented."

    def invoke(self, argv):
        raise NotImplementedError()
