from fideliza.jobs import build_scheduler, run_reconciliation_once
from fideliza.jobs.reconciliation import JOB_ID
from fideliza.models import Customer


def test_reconciliation_job_repairs_balances(database, make_customer) -> None:
    customer = make_customer(25)
    with database.session() as session:
        session.get(Customer, customer.customer_id).total_points = 3

    summary = run_reconciliation_once(database)

    assert summary == {"customers_checked": 1, "drifted": 1, "repaired": 1}
    with database.session() as session:
        assert session.get(Customer, customer.customer_id).total_points == 25


def test_reconciliation_on_consistent_data_is_a_no_op(database, make_customer) -> None:
    make_customer(25)
    make_customer(0)

    assert run_reconciliation_once(database) == {"customers_checked": 2, "drifted": 0, "repaired": 0}


def test_scheduler_registers_daily_job(database) -> None:
    scheduler = build_scheduler(database, hour=4)

    job = scheduler.get_job(JOB_ID)

    assert job is not None
    assert "hour='4'" in str(job.trigger)
    assert not scheduler.running
