"""winctl - window control plane (cli client & daemon)."""

import asyncio
import sys

from .client import run_client
from .config import load_config
from .constants import CONFIG_FILE
from .daemon import run_daemon
from .logging_setup import get_logger, init_logger
from .models import ExitCode, WinctlError

__all__ = ["main", "use_param"]


def use_param(txt: str, args: list[str] | None = None) -> str:
    """Check if parameter `txt` is in sys.argv.

    if found, removes it from sys.argv & returns the argument value
    """
    argv = sys.argv if args is None else args
    v = ""
    if txt in argv:
        i = argv.index(txt)
        if i + 1 >= len(argv):
            return v
        v = argv[i + 1]
        del argv[i : i + 2]
    return v


async def _run_client(config_file: str, args: list[str]) -> ExitCode:
    config = await load_config(config_file, get_logger("client"))
    return await run_client(args, config.get_str("socket_path"))


def main() -> None:
    """Run the command."""
    debug_flag = use_param("--debug")
    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger("startup")

    config_file = use_param("--config") or str(CONFIG_FILE)

    invoke_daemon = len(sys.argv) <= 1
    exit_code = ExitCode.SUCCESS
    try:
        if invoke_daemon:
            asyncio.run(run_daemon(config_file))
        else:
            exit_code = asyncio.run(_run_client(config_file, sys.argv[1:]))
    except KeyboardInterrupt:
        pass
    except WinctlError:
        log.critical("Command failed.")
        exit_code = ExitCode.COMMAND_ERROR
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        exit_code = ExitCode.COMMAND_ERROR
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
