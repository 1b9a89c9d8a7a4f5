"""
Tests for logging configuration.
"""
from unittest.mock import patch, MagicMock

from revstamp.logging_config import RAW_LEVEL, LoguruLogger, get_default_logger, setup_logging


class TestLoggingConfig:
    """Test logging configuration."""

    @patch('revstamp.logging_config.logger')
    def test_setup_logging_default(self, mock_logger):
        """Test setup logging with default level."""
        setup_logging()

        # Should configure logger
        mock_logger.remove.assert_called()
        mock_logger.add.assert_called()
        assert mock_logger.add.call_args.kwargs['level'] == 'INFO'

    @patch('revstamp.logging_config.logger')
    def test_setup_logging_trace(self, mock_logger):
        """Test setup logging with TRACE level."""
        setup_logging('TRACE')

        mock_logger.remove.assert_called_once()
        assert mock_logger.add.call_args.kwargs['level'] == 'TRACE'

    @patch('revstamp.logging_config.logger')
    def test_setup_logging_with_console(self, mock_logger):
        """Test that log messages are printed through the given console."""
        mock_console = MagicMock()

        setup_logging('INFO', console=mock_console)

        mock_logger.remove.assert_called_once()
        sink = mock_logger.add.call_args.args[0]
        sink('hello\n')
        mock_console.print.assert_called_once_with('hello\n', end='', markup=False, highlight=False)

    @patch('revstamp.logging_config.logger')
    def test_raw_level_is_registered(self, mock_logger):
        """Test that the RAW level sits below TRACE."""
        setup_logging('RAW')

        mock_logger.level.assert_any_call(RAW_LEVEL, no=4, color='<magenta>', icon='📄')


class TestLoguruLogger:
    """Test forwarding of revision events to loguru."""

    @patch('revstamp.logging_config.logger')
    def test_levels(self, mock_logger):
        log = LoguruLogger()
        opt = mock_logger.opt.return_value

        log.raw_output('raw line')
        log.trace('trace message')
        log.success('success message')
        log.info('info message')
        log.warning('warning message')
        log.error('error message')

        opt.log.assert_called_once_with(RAW_LEVEL, 'raw line')
        opt.trace.assert_called_once_with('trace message')
        opt.success.assert_called_once_with('success message')
        opt.info.assert_called_once_with('info message')
        opt.warning.assert_called_once_with('warning message')
        opt.error.assert_called_once_with('error message')
        mock_logger.opt.assert_called_with(depth=1)

    def test_get_default_logger(self):
        assert isinstance(get_default_logger(), LoguruLogger)
