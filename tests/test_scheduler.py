import asyncio

from src.sla.infrastructure import JobScheduler


def test_registers_jobs_and_starts():
    async def job(should_stop):
        return None

    async def scenario():
        scheduler = JobScheduler()
        scheduler.add_interval_job(job, seconds=3600, job_id="sla_escalation")
        scheduler.add_cron_job(job, job_id="weekly_agent_scores", day_of_week="mon", hour=1)
        scheduler.start()
        assert scheduler.is_running
        assert sorted(scheduler.job_ids) == ["sla_escalation", "weekly_agent_scores"]
        await scheduler.stop()
        assert not scheduler.is_running

    asyncio.run(scenario())


def test_stop_lets_running_job_finish_current_item():
    processed = []

    async def scenario():
        started = asyncio.Event()

        async def job(should_stop):
            for i in range(10):
                if should_stop():
                    break
                processed.append(i)
                started.set()
                await asyncio.sleep(0.01)

        scheduler = JobScheduler()
        scheduler.add_interval_job(job, seconds=3600, job_id="sla_escalation")
        scheduler.start()

        run = asyncio.create_task(scheduler._wrap("sla_escalation", job)())
        await started.wait()
        await scheduler.stop(timeout=5)

        assert run.done()
        # runs triggered after shutdown began return immediately
        await scheduler._wrap("sla_escalation", job)()

    asyncio.run(scenario())
    assert processed == [0]


def test_job_errors_are_contained():
    async def job(should_stop):
        raise RuntimeError("boom")

    async def scenario():
        scheduler = JobScheduler()
        await scheduler._wrap("failing", job)()

    asyncio.run(scenario())
