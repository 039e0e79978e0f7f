from rich.pretty import pprint

from switchyard import *

registry = Registry(shell=True, responses=True, deferred=True, colorful=True)

verbose = registry.option("verbose|v", type=bool, arguments=Arguments.DISALLOWED, formatting=Formatting.GROUPING)
level = registry.option("debug-level|d", type=int, arguments=Arguments.REQUIRED, formatting=Formatting.GROUPING)
includes = registry.option("I", arguments=Arguments.REQUIRED, formatting=Formatting.MAY_PREFIX, storage=Container(list))
files = registry.option("files", label="file", storage=Container(list), formatting=Formatting.POSITIONAL)


if __name__ == '__main__':
    pprint(registry.invoke())
    pprint((verbose, level, includes, files))
