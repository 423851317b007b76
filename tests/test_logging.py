from __future__ import annotations

import structlog

from discord_runtime.logging import configure_logging, get_logger


def test_configure_logging_filters_debug(capsys) -> None:
    try:
        configure_logging(debug=False, json=True)
        logger = get_logger("test")
        logger.debug("hidden.event")
        logger.info("shown.event", channel_id=5)
        err = capsys.readouterr().err
        assert "hidden.event" not in err
        assert '"channel_id": 5' in err
    finally:
        structlog.reset_defaults()
