# -*- coding: UTF-8 -*-

class Config:

    """ recursion budget of one decode call.
        every nested type, context, entity, global, archetype,
        bound generic argument list and generic signature costs one unit.
        the decode fails when the budget runs out.
    """
    cfgDemangleMaxDepth = 128

    """ largest natural number accepted in a mangled name,
        a longer digit run fails the production.
    """
    cfgDemangleMaxNatural = (1 << 64) - 1

    """ control the symbol length in log lines """
    cfgStringShortLength = 50

    """ control the output leves
        DEBUG >=10,
        VERBOSE >=20,
        INFO >=30,
        WARN >=40,
        ERROR >=50,
        CRITICAL >=60
    """
    cfgLoggingLevel = 30

    """ colored log output
        False: plain text
        True: ansi colors
    """
    cfgLoggingColor = True

    """ control the profiler decorator
        0: disabled
        1: timeit, 'func() takes x seconds.'
        2: python profiler, 'function costs detail'
    """
    cfgProfilerMode = 0

    @classmethod
    def Keys(cls):
        return [k for k in cls.__dict__ if k.startswith('cfg')]

    @classmethod
    def Show(cls, Key=None):
        for k in cls.Keys():
            if Key is not None and k != Key:
                continue
            print(k, "=", getattr(cls, k))

    @classmethod
    def SetValue(cls, key, value):
        if key not in cls.Keys():
            from swdemangle.errors import DemangleError
            DemangleError.BadConfig(key)
        setattr(cls, key, value)
        return value

    @classmethod
    def Convert(cls, key, text):
        """ convert text to the type of the current value """
        v = getattr(cls, key, None)
        if isinstance(v, bool):
            from swdemangle.utility import to_bool
            return to_bool(text)
        if isinstance(v, int):
            return int(text, 0)
        return text

    @classmethod
    def LoadEnviron(cls, name='SWDEMANGLE_CONFIG'):
        """ apply 'key=value,key=value' overrides from the environment """
        import os
        overrides = os.environ.get(name)
        if not overrides:
            return
        for item in overrides.split(','):
            if '=' not in item:
                continue
            k, v = item.split('=', 1)
            k = k.strip()
            cls.SetValue(k, cls.Convert(k, v.strip()))
