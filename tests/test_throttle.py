"""
Tests for batched Shopify call execution.
"""
import threading
from unittest.mock import patch

from showroom.utils.throttle import run_in_batches


class TestRunInBatches:
    """Tests for run_in_batches."""

    def test_results_keep_input_order(self):
        results = run_in_batches(range(12), lambda n: n * 2, batch_size=5, delay_ms=0)

        assert [r.item for r in results] == list(range(12))
        assert [r.result for r in results] == [n * 2 for n in range(12)]
        assert all(r.success for r in results)

    def test_failure_is_isolated(self):
        def work(n):
            if n == 3:
                raise ValueError('bad item')
            return n

        results = run_in_batches(range(6), work, batch_size=5, delay_ms=0)

        failed = [r for r in results if not r.success]
        assert [r.item for r in failed] == [3]
        assert failed[0].error == 'bad item'
        assert sum(1 for r in results if r.success) == 5

    def test_batches_never_exceed_batch_size(self):
        lock = threading.Lock()
        active = {'now': 0, 'peak': 0}
        release = threading.Event()

        def work(n):
            with lock:
                active['now'] += 1
                active['peak'] = max(active['peak'], active['now'])
            release.wait(0.01)
            with lock:
                active['now'] -= 1

        run_in_batches(range(11), work, batch_size=5, delay_ms=0)

        assert active['peak'] <= 5

    @patch('showroom.utils.throttle.time.sleep')
    def test_sleeps_between_batches_only(self, mock_sleep):
        run_in_batches(range(11), lambda n: n, batch_size=5, delay_ms=100)

        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(0.1)

    @patch('showroom.utils.throttle.time.sleep')
    def test_single_batch_does_not_sleep(self, mock_sleep):
        run_in_batches(range(5), lambda n: n, batch_size=5, delay_ms=100)
        mock_sleep.assert_not_called()

    def test_empty_input(self):
        assert run_in_batches([], lambda n: n) == []
