import logging

from ccmkit.utils import debug_logger


def test_convenience_functions_prefix_the_module(ccmkit_log):
    debug_logger.debug("resampling onto 5 nm grid", "spectra")
    debug_logger.info("baseline ready", "optimizer")
    debug_logger.warning("bias ignored")
    records = [(r.levelno, r.getMessage()) for r in ccmkit_log.records if r.name == debug_logger.LOGGER_NAME]
    assert records == [
        (logging.DEBUG, "[spectra] resampling onto 5 nm grid"),
        (logging.INFO, "[optimizer] baseline ready"),
        (logging.WARNING, "bias ignored"),
    ]


def test_logger_is_a_non_propagating_singleton():
    assert debug_logger.CCMDebugLogger() is debug_logger.debug_logger
    assert debug_logger.debug_logger.logger is logging.getLogger(debug_logger.LOGGER_NAME)
    assert not debug_logger.debug_logger.logger.propagate
