"""Long-option command-line parsing where options may start with one or two dashes."""

from dataclasses import dataclass, field
from enum import IntEnum


class ArgKind(IntEnum):
    """Whether an option takes an argument."""

    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


@dataclass
class ParseResult:
    """Values found on the command line, keyed by option or positional name."""

    values: dict = field(default_factory=dict)
    error: bool = False


@dataclass(frozen=True)
class _OptionSpec:
    name: str
    kind: ArgKind


class CmdLineParser:
    """Parser for named options and a fixed list of positional arguments.

    Options are matched by exact name or by an unambiguous prefix. An option
    without an argument, or an optional-argument option given none, gets the
    value "1". Positionals beyond those registered are ignored.
    """

    def __init__(self):
        self._options = []
        self._non_options = []

    def add_option(self, name, has_arg):
        """Register an option; ``has_arg`` is an ArgKind or 0, 1, 2."""
        if name is None:
            raise ValueError("option name is required")
        self._options.append(_OptionSpec(name, ArgKind(has_arg)))

    def add_non_option(self, name):
        """Register the next positional argument under ``name``."""
        self._non_options.append(name)

    def _match(self, name):
        for option in self._options:
            if option.name == name:
                return option
        candidates = [opt for opt in self._options if opt.name.startswith(name)]
        return candidates[0] if len(candidates) == 1 else None

    def parse(self, argv):
        """Parse the arguments that follow the program name."""
        result = ParseResult()
        positionals = []
        args = iter(argv)

        for arg in args:
            if arg == "--":
                positionals.extend(rest for rest in args if rest != "--")
                break
            if not arg.startswith("-") or arg == "-":
                positionals.append(arg)
                continue

            body = arg[2:] if arg.startswith("--") else arg[1:]
            name, has_inline, inline = body.partition("=")
            option = self._match(name)
            if option is None:
                result.error = True
                continue

            if has_inline:
                if option.kind is ArgKind.NONE:
                    result.error = True
                    continue
                result.values[option.name] = inline
            elif option.kind is ArgKind.REQUIRED:
                value = next(args, None)
                if value is None:
                    result.error = True
                    continue
                result.values[option.name] = value
            else:
                result.values[option.name] = "1"

        for name, value in zip(self._non_options, positionals):
            result.values[name] = value
        return result