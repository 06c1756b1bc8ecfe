"""
Tests for Medication and Schedule Services
"""

import pytest
from datetime import time

from services.medication_service import MedicationService
from services.schedule_service import ScheduleService, normalize_days
from exceptions import AuthorizationError, NotFoundError


@pytest.fixture
def medication_service():
    return MedicationService()


@pytest.fixture
def schedule_service():
    return ScheduleService()


class TestNormalizeDays:

    @pytest.mark.unit
    def test_none_means_every_day(self):
        assert normalize_days(None) == [0, 1, 2, 3, 4, 5, 6]

    @pytest.mark.unit
    def test_sorted_and_deduplicated(self):
        assert normalize_days([6, 0, 6]) == [0, 6]

    @pytest.mark.unit
    def test_empty_list_kept(self):
        assert normalize_days([]) == []

    @pytest.mark.unit
    def test_out_of_range(self):
        with pytest.raises(ValueError):
            normalize_days([7])


class TestMedications:

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_add_with_first_schedule(self, medication_service, db_session, test_patient):
        medication = await medication_service.add_medication(
            test_patient.id, "Lisinopril", "10mg", time(9, 0), db=db_session
        )

        assert medication.active
        assert len(medication.schedules) == 1
        assert medication.schedules[0].time == time(9, 0)
        assert medication.schedules[0].days_of_week == [0, 1, 2, 3, 4, 5, 6]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_newest_first_and_active_only(self, medication_service, db_session, test_patient):
        first = await medication_service.add_medication(
            test_patient.id, "Aspirin", "81mg", time(8, 0), db=db_session
        )
        second = await medication_service.add_medication(
            test_patient.id, "Atorvastatin", "20mg", time(21, 0), db=db_session
        )
        await medication_service.deactivate_medication(test_patient.id, first.id, db=db_session)

        active = await medication_service.get_patient_medications(
            test_patient.id, test_patient.id, db=db_session
        )
        everything = await medication_service.get_patient_medications(
            test_patient.id, test_patient.id, active_only=False, db=db_session
        )

        assert [m.id for m in active] == [second.id]
        assert [m.id for m in everything] == [second.id, first.id]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_only_by_owner(self, medication_service, db_session, other_patient, test_medication):
        with pytest.raises(AuthorizationError):
            await medication_service.update_medication(
                other_patient.id, test_medication.id, {"dosage": "1000mg"}, db=db_session
            )

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_unknown(self, medication_service, db_session, test_patient):
        with pytest.raises(NotFoundError):
            await medication_service.get_medication(test_patient.id, 9999, db=db_session)


class TestSchedules:

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_weekly_counts(self, schedule_service, db_session, test_patient, test_medication, test_schedule):
        await schedule_service.create_schedule(
            test_patient.id, test_medication.id, time(20, 0), [0, 6], db=db_session
        )

        counts = await schedule_service.get_weekly_counts(test_patient.id, test_patient.id, db=db_session)

        assert counts == {0: 2, 1: 1, 2: 1, 3: 1, 4: 1, 5: 1, 6: 2}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_deactivated_schedule_not_counted(
        self, schedule_service, db_session, test_patient, test_schedule
    ):
        await schedule_service.deactivate_schedule(test_patient.id, test_schedule.id, db=db_session)

        counts = await schedule_service.get_weekly_counts(test_patient.id, test_patient.id, db=db_session)

        assert sum(counts.values()) == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_caregiver_cannot_add_schedule(
        self, schedule_service, db_session, test_medication, connected_caregiver
    ):
        with pytest.raises(AuthorizationError):
            await schedule_service.create_schedule(
                connected_caregiver.id, test_medication.id, time(12, 0), db=db_session
            )
