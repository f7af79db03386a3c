from __future__ import annotations

from unittest.mock import Mock, patch

from enrollment_trends.services.progress import FrameProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestFrameProgress:

    def test_init_with_tty_enabled(self):
        with patch('enrollment_trends.services.progress.is_tty_enabled', return_value=True), \
             patch('enrollment_trends.services.progress.tqdm') as mock_tqdm:

            progress = FrameProgress(17, description="Rendering trends.gif")

            assert progress.total_frames == 17
            assert progress.current_frame == 0
            assert progress.enabled is True
            mock_tqdm.assert_called_once_with(
                total=17,
                desc="Rendering trends.gif",
                unit="frame",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('enrollment_trends.services.progress.is_tty_enabled', return_value=False):
            progress = FrameProgress(5)
            assert progress.enabled is False
            assert progress.pbar is None

    def test_callback_updates_bar_per_frame(self):
        mock_pbar = Mock()
        with patch('enrollment_trends.services.progress.is_tty_enabled', return_value=True), \
             patch('enrollment_trends.services.progress.tqdm', return_value=mock_pbar):
            progress = FrameProgress(3)
            progress(0, 3)
            progress(1, 3)
            progress(2, 3)

        assert progress.current_frame == 3
        assert mock_pbar.update.call_count == 3
        mock_pbar.update.assert_called_with(1)

    def test_callback_without_tty_only_counts(self):
        with patch('enrollment_trends.services.progress.is_tty_enabled', return_value=False):
            progress = FrameProgress(2)
            progress(0, 2)
            progress(1, 2)
        assert progress.current_frame == 2

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch('enrollment_trends.services.progress.is_tty_enabled', return_value=True), \
             patch('enrollment_trends.services.progress.tqdm', return_value=mock_pbar):
            with FrameProgress(2) as progress:
                pass

        mock_pbar.close.assert_called_once()
        assert progress.pbar is None
