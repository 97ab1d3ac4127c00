from __future__ import annotations

from unittest.mock import Mock, patch

from heart_score.services.progress import RowProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestRowProgress:
    """RowProgress wraps tqdm only on a TTY."""

    def test_init_with_tty_enabled(self):
        with patch('heart_score.services.progress.is_tty_enabled', return_value=True), \
             patch('heart_score.services.progress.tqdm') as mock_tqdm:
            progress = RowProgress(12)

            assert progress.total_rows == 12
            assert progress.description == "Deriving countries"
            assert progress.enabled is True
            mock_tqdm.assert_called_once_with(
                total=12,
                desc="Deriving countries",
                unit="row",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('heart_score.services.progress.is_tty_enabled', return_value=False), \
             patch('heart_score.services.progress.tqdm') as mock_tqdm:
            progress = RowProgress(12)

            assert progress.enabled is False
            assert progress.pbar is None
            mock_tqdm.assert_not_called()

    def test_advance_updates_bar_with_country(self):
        mock_pbar = Mock()
        with patch('heart_score.services.progress.is_tty_enabled', return_value=True), \
             patch('heart_score.services.progress.tqdm', return_value=mock_pbar):
            progress = RowProgress(3)
            progress.advance("Alpha")
            progress.advance()

            assert progress.current_row == 2
            mock_pbar.set_postfix.assert_called_once_with(country="Alpha")
            assert mock_pbar.update.call_count == 2

    def test_advance_without_tty_only_counts(self):
        with patch('heart_score.services.progress.is_tty_enabled', return_value=False):
            progress = RowProgress(3)
            progress.advance("Alpha")
            assert progress.current_row == 1

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch('heart_score.services.progress.is_tty_enabled', return_value=True), \
             patch('heart_score.services.progress.tqdm', return_value=mock_pbar):
            with RowProgress(1) as progress:
                progress.advance("Alpha")

            mock_pbar.close.assert_called_once()
            assert progress.pbar is None
