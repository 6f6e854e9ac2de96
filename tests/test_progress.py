"""Tests for progress bar lifecycle management."""

from unittest.mock import MagicMock, patch

import pytest

from pedtools.core.progress import maybe_progress, progress_iterator


@pytest.mark.tier0
class TestProgressBarLifecycle:
    """Tests that progress bar is finalized correctly in all scenarios."""

    def test_finish_called_on_normal_completion(self):
        """bar.finish() is called when iteration completes normally."""
        items = list(range(5))
        collected = []

        with patch("pedtools.core.progress.progressbar") as mock_pb:
            mock_bar = MagicMock()
            mock_pb.ProgressBar.return_value = mock_bar

            for item in progress_iterator(iter(items), total=5, desc="test"):
                collected.append(item)

            mock_bar.finish.assert_called_once()
            assert collected == items
            assert mock_bar.update.call_count == 5

    def test_finish_called_on_early_break(self):
        """bar.finish() is called when caller breaks out of loop early."""
        with patch("pedtools.core.progress.progressbar") as mock_pb:
            mock_bar = MagicMock()
            mock_pb.ProgressBar.return_value = mock_bar

            gen = progress_iterator(iter(range(10)), total=10, desc="test")
            for i, _item in enumerate(gen):
                if i == 2:
                    break
            gen.close()

            mock_bar.finish.assert_called_once()

    def test_finish_called_on_exception(self):
        """bar.finish() is called when the wrapped iterable raises."""

        def exploding_items():
            yield 1
            yield 2
            raise RuntimeError("boom")

        with patch("pedtools.core.progress.progressbar") as mock_pb:
            mock_bar = MagicMock()
            mock_pb.ProgressBar.return_value = mock_bar

            with pytest.raises(RuntimeError, match="boom"):
                for _ in progress_iterator(exploding_items(), total=5, desc="test"):
                    pass

            mock_bar.finish.assert_called_once()


@pytest.mark.tier0
class TestMaybeProgress:
    """Tests for maybe_progress."""

    def test_disabled_returns_iterable(self):
        items = range(10)
        assert maybe_progress(items, 10, "x", enabled=False) is items

    def test_single_item_not_wrapped(self):
        items = range(1)
        assert maybe_progress(items, 1, "x", enabled=True) is items

    def test_enabled_wraps(self):
        with patch("pedtools.core.progress.progressbar") as mock_pb:
            mock_bar = MagicMock()
            mock_pb.ProgressBar.return_value = mock_bar

            out = list(maybe_progress(range(3), 3, "x", enabled=True))

            assert out == [0, 1, 2]
            mock_pb.ProgressBar.assert_called_once()
            mock_bar.finish.assert_called_once()

    def test_label_leads_the_bar(self):
        with patch("pedtools.core.progress.progressbar") as mock_pb:
            list(progress_iterator(range(3), total=3, desc="inbreeding"))
            widgets = mock_pb.ProgressBar.call_args.kwargs["widgets"]
            assert widgets[0] == "inbreeding: "
            assert mock_pb.ProgressBar.call_args.kwargs["max_value"] == 3

            list(progress_iterator(range(3), total=3))
            widgets = mock_pb.ProgressBar.call_args.kwargs["widgets"]
            assert widgets[0] is mock_pb.SimpleProgress.return_value
