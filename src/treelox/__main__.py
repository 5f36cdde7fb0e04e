import logging
import os
import sys

from treelox import lox as loxlib

logger = logging.getLogger("treelox")

EXIT_FAILURE = 1


def usage(lox: loxlib.Lox) -> str:
    commands = "|".join(lox.modes)
    return f"Usage: treelox [script] | treelox <{commands}> <file>"


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    logging.basicConfig(
        level=logging.DEBUG if os.environ.get("TREELOX_DEBUG") else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    lox = loxlib.Lox()

    match argv:
        case []:
            lox.run_prompt()
            return lox.exit_code()
        case [path]:
            mode = "run"
        case [mode, path] if mode in lox.modes:
            pass
        case [mode, _]:
            print(f"Unknown command: {mode}", file=sys.stderr)
            print(usage(lox), file=sys.stderr)
            return EXIT_FAILURE
        case _:
            print(usage(lox), file=sys.stderr)
            return EXIT_FAILURE

    try:
        return lox.run_file(path, mode)
    except OSError as error:
        print(f"Could not read '{path}': {error.strerror}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception:
        logger.exception("Internal interpreter failure while running '%s'", path)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
