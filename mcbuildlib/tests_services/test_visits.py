import threading

from mcbuildlib.services.visits import VisitCounter


def test_increment_and_reset():
    counter = VisitCounter()
    assert counter.increment() == 1
    assert counter.increment() == 2
    assert counter.total == 2
    counter.reset()
    assert counter.total == 0


def test_concurrent_increments_are_not_lost():
    counter = VisitCounter()
    per_thread, threads = 500, 8

    def work():
        for _ in range(per_thread):
            counter.increment()

    workers = [threading.Thread(target=work) for _ in range(threads)]
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    assert counter.total == per_thread * threads
