"""
Command-line interface for gox.

This module provides the `gox` CLI tool for cross-compiling Go programs.
"""

import argparse
import sys
from typing import List, Optional

from .cli_utils import ErrorFormatter, setup_logging
from .compiler import DEFAULT_OUTPUT_TEMPLATE
from .config import CrossCompileConfig
from .cross_compile import cross_compile
from .dispatcher import AggregateBuildError
from .errors import GoxError
from .platform_filter import PlatformFilter
from .toolchain import DEFAULT_GO_CMD

HELP_TEXT = """Usage: gox [options] [packages]

  Gox cross-compiles Go applications in parallel.

  If no specific operating systems or architectures are specified, Gox
  will build for all pairs supported by your version of Go.

Options:

  -arch=""            Space-separated list of architectures to build for
  -build-toolchain    Build cross-compilation toolchain
  -cgo                Sets CGO_ENABLED=1, requires proper C toolchain (advanced)
  -gcflags=""         Additional '-gcflags' value to pass to go build
  -ldflags=""         Additional '-ldflags' value to pass to go build
  -tags=""            Additional '-tags' value to pass to go build
  -os=""              Space-separated list of operating systems to build for
  -osarch=""          Space-separated list of os/arch pairs to build for
  -osarch-list        List supported os/arch pairs for your Go version
  -output="foo"       Output path template. See below for more info
  -parallel=-1        Amount of parallelism, defaults to number of CPUs
  -gocmd="go"         Build command, defaults to Go
  -rebuild            Force rebuilding of package that were up to date
  -verbose            Verbose mode

Output path template:

  The output path for the compiled binaries is specified with the
  "-output" flag. The value is a string with placeholders in the style
  of a Go text template. The default value is "{{.Dir}}_{{.OS}}_{{.Arch}}".
  The variables and their values should be self-explanatory.

Platforms (OS/Arch):

  The operating systems and architectures to cross-compile for may be
  specified with the "-arch" and "-os" flags. These are space separated lists
  of valid GOOS/GOARCH values to build for, respectively. You may prefix an
  OS or Arch with "!" to negate and not build for that platform. If the list
  is made up of only negations, then the negations will come from the default
  list.

  Additionally, the "-osarch" flag may be used to specify complete os/arch
  pairs that should be built or ignored. The syntax for this is what you would
  expect: "darwin/amd64" would be a valid osarch value. Multiple can be space
  separated. An os/arch pair can begin with "!" to not build for that platform.

  The "-osarch" flag has the highest precedent when determing whether to
  build for a platform. If it is included in the "-osarch" list, it will be
  built even if the specific os and arch is negated in "-os" and "-arch",
  respectively.

Platform Overrides:

  The "-gcflags" and "-ldflags" options can be overridden per-platform
  by using environment variables. Gox will look for environment variables
  in the following format and use those to override values if they exist:

    GOX_[OS]_[ARCH]_GCFLAGS
    GOX_[OS]_[ARCH]_LDFLAGS

"""


class _HelpAction(argparse.Action):
    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        sys.stderr.write(HELP_TEXT)
        parser.exit(0)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Flags use a single dash, as the go tool's do.
    """
    parser = argparse.ArgumentParser(prog="gox", add_help=False, allow_abbrev=False)
    parser.add_argument("-h", "-help", "--help", action=_HelpAction)
    parser.add_argument("-arch", default="", help="arch to build for or skip")
    parser.add_argument("-os", dest="os_", default="", help="os to build for or skip")
    parser.add_argument("-osarch", default="", help="os/arch pairs to build for or skip")
    parser.add_argument("-ldflags", default="", help="linker flags")
    parser.add_argument("-tags", default="", help="go build tags")
    parser.add_argument("-gcflags", default="")
    parser.add_argument("-output", default=DEFAULT_OUTPUT_TEMPLATE, help="output path")
    parser.add_argument("-parallel", type=int, default=-1, help="parallelization factor")
    parser.add_argument("-build-toolchain", dest="build_toolchain", action="store_true")
    parser.add_argument("-verbose", action="store_true")
    parser.add_argument("-cgo", action="store_true")
    parser.add_argument("-rebuild", action="store_true")
    parser.add_argument("-osarch-list", dest="osarch_list", action="store_true")
    parser.add_argument("-gocmd", default=DEFAULT_GO_CMD)
    parser.add_argument("packages", nargs="*")
    return parser


# Flags that always take a value. Their value may itself start with a dash
# ("-ldflags -w"), which argparse would otherwise read as another option.
VALUE_FLAGS = frozenset(
    ["-arch", "-os", "-osarch", "-ldflags", "-tags", "-gcflags", "-output", "-parallel", "-gocmd"]
)


def join_flag_values(argv: List[str]) -> List[str]:
    """Rewrite ``-flag value`` as ``-flag=value`` for flags that take a value."""
    joined: List[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            joined.extend(argv[i:])
            break
        if arg in VALUE_FLAGS and i + 1 < len(argv):
            joined.append(f"{arg}={argv[i + 1]}")
            i += 2
            continue
        joined.append(arg)
        i += 1
    return joined


def parse_config(argv: Optional[List[str]] = None) -> CrossCompileConfig:
    """Parse command-line arguments into a CrossCompileConfig."""
    parser = build_parser()
    args = parser.parse_args(join_flag_values(sys.argv[1:] if argv is None else list(argv)))

    try:
        platform_filter = PlatformFilter.from_strings(os=args.os_, arch=args.arch, osarch=args.osarch)
    except ValueError as e:
        parser.error(str(e))

    return CrossCompileConfig(
        packages=args.packages or ["."],
        platform_filter=platform_filter,
        output_template=args.output,
        ldflags=args.ldflags,
        tags=args.tags,
        gcflags=args.gcflags,
        parallel=args.parallel,
        build_toolchain=args.build_toolchain,
        cgo=args.cgo,
        rebuild=args.rebuild,
        list_osarch=args.osarch_list,
        verbose=args.verbose,
        go_cmd=args.gocmd,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """gox - cross-compile Go programs in parallel."""
    config = parse_config(argv)
    setup_logging(config.verbose)

    try:
        cross_compile(config)
    except AggregateBuildError as e:
        ErrorFormatter.handle_build_errors(e)
    except GoxError as e:
        ErrorFormatter.handle_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, config.verbose)

    sys.exit(0)


if __name__ == "__main__":
    main()
