import threading
import unittest

from vc_changelog.tracker.batch_fetcher import chunk, fetch_all, with_retry


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class TestChunk(unittest.TestCase):
    def test_chunk_sizes(self) -> None:
        self.assertEqual([len(c) for c in chunk(list(range(12)), 5)], [5, 5, 2])
        self.assertEqual(chunk([], 5), [])

    def test_invalid_size(self) -> None:
        with self.assertRaises(ValueError):
            chunk([1], 0)


class TestWithRetry(unittest.TestCase):
    def test_succeeds_after_two_failures(self) -> None:
        attempts = []

        def flaky(item):
            attempts.append(item)
            if len(attempts) < 3:
                raise ConnectionError("temporary")
            return item * 2

        sleep = RecordingSleep()
        self.assertEqual(with_retry(flaky, attempts=10, delay=1.5, sleep=sleep)(21), 42)
        self.assertEqual(len(attempts), 3)
        self.assertEqual(sleep.calls, [1.5, 1.5])

    def test_reraises_last_error(self) -> None:
        errors = [ValueError("first"), ValueError("second"), ValueError("last")]

        def failing(item):
            raise errors.pop(0)

        with self.assertRaises(ValueError) as ctx:
            with_retry(failing, attempts=3, delay=0, sleep=RecordingSleep())(1)
        self.assertEqual(str(ctx.exception), "last")

    def test_unlisted_errors_are_not_retried(self) -> None:
        calls = []

        def failing(item):
            calls.append(item)
            raise KeyError(item)

        with self.assertRaises(KeyError):
            with_retry(failing, attempts=5, sleep=RecordingSleep(), retry_on=(ConnectionError,))(1)
        self.assertEqual(calls, [1])

    def test_invalid_attempts(self) -> None:
        with self.assertRaises(ValueError):
            with_retry(lambda item: item, attempts=0)


class TestFetchAll(unittest.TestCase):
    def test_batches_and_delays(self) -> None:
        lock = threading.Lock()
        in_flight = {"now": 0, "max": 0}

        def fetch(number):
            with lock:
                in_flight["now"] += 1
                in_flight["max"] = max(in_flight["max"], in_flight["now"])
            with lock:
                in_flight["now"] -= 1
            return {"number": number}

        sleep = RecordingSleep()
        numbers = list(range(1, 13))
        results = fetch_all(numbers, fetch, batch_size=5, batch_delay=0.5, sleep=sleep)

        self.assertEqual([r["number"] for r in results], numbers)
        self.assertEqual(sleep.calls, [0.5, 0.5])
        self.assertLessEqual(in_flight["max"], 5)

    def test_batch_runs_after_previous_finished(self) -> None:
        batch_of = {}
        seen = []

        def fetch(number):
            batch_of[number] = len(seen)
            return number

        def sleep(seconds):
            seen.append(seconds)

        fetch_all([1, 2, 3, 4], fetch, batch_size=2, sleep=sleep)
        self.assertEqual(batch_of, {1: 0, 2: 0, 3: 1, 4: 1})

    def test_calls_within_a_batch_run_concurrently(self) -> None:
        # every call of a batch blocks until the whole batch has arrived
        barrier = threading.Barrier(5, timeout=2)

        def fetch(number):
            barrier.wait()
            return number * 10

        result = fetch_all(list(range(10)), fetch, batch_size=5, attempts=1, sleep=RecordingSleep())
        self.assertEqual(result, [n * 10 for n in range(10)])

    def test_results_keep_slot_order(self) -> None:
        first_slot_done = threading.Event()

        def fetch(number):
            if number == 2:
                first_slot_done.wait(timeout=2)
            if number == 1:
                first_slot_done.set()
            return number

        self.assertEqual(fetch_all([2, 1, 3], fetch, sleep=RecordingSleep()), [2, 1, 3])

    def test_duplicates_fetched_again(self) -> None:
        calls = []
        lock = threading.Lock()

        def fetch(number):
            with lock:
                calls.append(number)
            return number

        fetch_all([1, 1, 2], fetch, sleep=RecordingSleep())
        self.assertEqual(sorted(calls), [1, 1, 2])

    def test_no_delay_for_single_batch(self) -> None:
        sleep = RecordingSleep()
        fetch_all([1, 2], lambda n: n, sleep=sleep)
        self.assertEqual(sleep.calls, [])

    def test_empty_input(self) -> None:
        self.assertEqual(fetch_all([], lambda n: n, sleep=RecordingSleep()), [])

    def test_permanent_failure_fails_everything(self) -> None:
        def fetch(number):
            if number == 7:
                raise RuntimeError("gone")
            return number

        sleep = RecordingSleep()
        with self.assertRaises(RuntimeError):
            fetch_all(list(range(1, 11)), fetch, attempts=3, retry_delay=1.5, sleep=sleep)
        # two retry waits for issue 7, one wait after the first batch
        self.assertEqual(sorted(sleep.calls), [0.5, 1.5, 1.5])


if __name__ == "__main__":
    unittest.main()
