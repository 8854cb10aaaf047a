import importlib

def load_engine(name : str):
    name = name.split('/')[-1].split('.')[0]
    modname = 'pyloop.config.' + name
    return importlib.import_module(modname)

def available_engines():
    import pkgutil
    import pyloop.config
    return sorted(m.name for m in pkgutil.iter_modules(pyloop.config.__path__))
