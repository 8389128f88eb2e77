import sys

from loguru import logger

PALETTE = {
    "bfs_solver": "cyan",
    "level_generator": "green",
    "level_tester": "magenta",
    "level_pack": "blue",
}

LEVEL_PER_COMPONENT = {
    "bfs_solver": "WARNING",
}

_min_level = "DEBUG"


def component_filter(record):
    comp = record["extra"].get("component", "")
    comp_level = logger.level(LEVEL_PER_COMPONENT.get(comp, "DEBUG")).no
    min_level = max(comp_level, logger.level(_min_level).no)
    return record["level"].no >= min_level


def formatter(record):
    comp = record["extra"].get("component", "")
    id = record["extra"].get("id", "")
    colour = PALETTE.get(comp, "white")

    # Colour tags must live in the template so loguru can turn them into ANSI codes.
    if id:
        return (
            "{time:HH:mm:ss} | "
            f"<{colour}>{comp:<15} | {id:<15}</> | "
            "<level>{message}</level>\n"
        )
    else:
        return (
            "{time:HH:mm:ss} | "
            f"<{colour}>{comp:<15}</> | "
            "<level>{message}</level>\n"
        )


def configure_logging(level: str = "DEBUG", colorize: bool = True) -> None:
    """Reinstall the stderr sink with a new global minimum level.

    Args:
        level: Minimum loguru level name applied on top of per-component levels
        colorize: Whether to emit ANSI colours
    """
    global _min_level
    _min_level = level
    logger.remove()
    logger.add(sys.stderr, format=formatter, filter=component_filter, colorize=colorize)


configure_logging()
