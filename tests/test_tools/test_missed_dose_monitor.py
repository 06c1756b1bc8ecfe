"""
Tests for Missed Dose Monitor
Tests the pending -> missed sweep and the caregiver alerts it raises
"""

import pytest
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from models import Alert, AlertType, CaregiverConnection, DoseLog, DoseStatus
from services.dose_service import dose_service
from tools.missed_dose_monitor import MissedDoseMonitor


@pytest.fixture
def monitor():
    return MissedDoseMonitor(threshold_minutes=120)


class TestIsOverdue:

    @pytest.mark.unit
    def test_threshold_is_exclusive(self, monitor):
        scheduled = datetime(2024, 1, 15, 8, 0)
        assert not monitor.is_overdue(scheduled, scheduled + timedelta(minutes=120))
        assert monitor.is_overdue(scheduled, scheduled + timedelta(minutes=121))


class TestScan:

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_recent_pending_dose_left_alone(self, monitor, db_session: Session, pending_dose):
        missed = await monitor.scan(at=datetime(2024, 1, 15, 9, 0), db=db_session)

        assert missed == []
        db_session.refresh(pending_dose)
        assert pending_dose.status == DoseStatus.PENDING

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_overdue_dose_marked_missed(self, monitor, db_session: Session, pending_dose):
        missed = await monitor.scan(at=datetime(2024, 1, 15, 10, 1), db=db_session)

        assert [log.id for log in missed] == [pending_dose.id]
        db_session.refresh(pending_dose)
        assert pending_dose.status == DoseStatus.MISSED
        assert pending_dose.taken_at is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_alerts_connected_caregivers(
        self, monitor, db_session: Session, pending_dose, connected_caregiver
    ):
        await monitor.scan(at=datetime(2024, 1, 15, 12, 0), db=db_session)

        alerts = db_session.query(Alert).all()
        assert len(alerts) == 1
        assert alerts[0].caregiver_id == connected_caregiver.id
        assert alerts[0].dose_log_id == pending_dose.id
        assert alerts[0].type == AlertType.MISSED_DOSE
        assert alerts[0].read_at is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_muted_caregiver_gets_no_alert(
        self, monitor, db_session: Session, pending_dose, connected_caregiver
    ):
        connection = db_session.query(CaregiverConnection).first()
        connection.notify_missed_doses = False
        db_session.commit()

        await monitor.scan(at=datetime(2024, 1, 15, 12, 0), db=db_session)

        assert db_session.query(Alert).count() == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_taken_dose_never_becomes_missed(
        self, monitor, db_session: Session, test_patient, pending_dose
    ):
        await dose_service.mark_taken(
            test_patient.id, pending_dose.id,
            taken_at=datetime(2024, 1, 15, 8, 5), db=db_session
        )

        missed = await monitor.scan(at=datetime(2024, 1, 15, 18, 0), db=db_session)

        assert missed == []
        db_session.refresh(pending_dose)
        assert pending_dose.status == DoseStatus.TAKEN

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_second_scan_does_not_duplicate(
        self, monitor, db_session: Session, pending_dose, connected_caregiver
    ):
        at = datetime(2024, 1, 15, 12, 0)
        await monitor.scan(at=at, db=db_session)
        again = await monitor.scan(at=at, db=db_session)

        assert again == []
        assert db_session.query(Alert).count() == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_uses_patient_wall_clock(
        self, monitor, db_session: Session, test_patient, pending_dose
    ):
        test_patient.timezone = "America/New_York"
        db_session.commit()

        # 12:00 UTC is 07:00 in New York, before the 08:00 dose
        assert await monitor.scan(at=datetime(2024, 1, 15, 12, 0), db=db_session) == []

        # 15:01 UTC is 10:01 in New York
        missed = await monitor.scan(at=datetime(2024, 1, 15, 15, 1), db=db_session)
        assert len(missed) == 1
        assert db_session.get(DoseLog, pending_dose.id).status == DoseStatus.MISSED
