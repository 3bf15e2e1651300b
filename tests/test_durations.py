import unittest

from smartplanning.shared.validators import normalize_day_key, normalize_role
from smartplanning.utils.durations import (
    LegacyRange,
    MalformedSlotError,
    RestDay,
    ScheduleDataError,
    SlotList,
    canonical_schedule_data,
    day_duration,
    english_day_keys,
    format_minutes,
    normalize_day,
    parse_slot,
    validate_schedule_data,
    week_total,
)


class TestNormalizeDay(unittest.TestCase):
    def test_variants(self) -> None:
        self.assertEqual(normalize_day(None), RestDay())
        self.assertEqual(normalize_day({}), RestDay())
        self.assertEqual(normalize_day({"slots": []}), RestDay())
        self.assertEqual(normalize_day(["08:00-12:00"]), SlotList(("08:00-12:00",)))
        self.assertEqual(
            normalize_day({"start": "09:00", "end": "17:00", "pause": "01:00"}),
            LegacyRange("09:00", "17:00", "01:00"),
        )

    def test_slots_win_over_start_end(self) -> None:
        day = normalize_day({"start": "09:00", "end": "17:00", "slots": ["10:00-11:00"]})
        self.assertEqual(day, SlotList(("10:00-11:00",)))
        self.assertEqual(day_duration(day), 60)

    def test_half_range_is_an_error(self) -> None:
        with self.assertRaises(ScheduleDataError):
            normalize_day({"start": "09:00"})


class TestDurations(unittest.TestCase):
    def test_week_total_of_split_monday(self) -> None:
        data = {"monday": {"slots": ["09:00-12:00", "14:00-18:00"]}}
        for day in ("tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"):
            data[day] = {}
        self.assertEqual(week_total(data), 420)
        self.assertEqual(format_minutes(week_total(data)), "7h00")

    def test_rest_day_is_zero(self) -> None:
        self.assertEqual(day_duration({}), 0)
        self.assertEqual(day_duration(None), 0)
        self.assertEqual(week_total({}), 0)

    def test_legacy_range_subtracts_pause(self) -> None:
        self.assertEqual(day_duration({"start": "09:00", "end": "17:30", "pause": "01:00"}), 450)
        self.assertEqual(day_duration({"start": "09:00", "end": "17:30"}), 510)

    def test_french_day_keys(self) -> None:
        data = {"lundi": {"slots": ["08:00-12:00"]}, "mardi": ["13:00-17:00"]}
        self.assertEqual(week_total(data), 480)
        self.assertEqual(
            canonical_schedule_data(data),
            {"monday": {"slots": ["08:00-12:00"]}, "tuesday": {"slots": ["13:00-17:00"]}},
        )

    def test_unknown_day_is_an_error(self) -> None:
        with self.assertRaises(ScheduleDataError):
            week_total({"funday": {"slots": ["08:00-12:00"]}})

    def test_same_day_twice_is_an_error(self) -> None:
        with self.assertRaises(ScheduleDataError):
            week_total({"monday": {}, "lundi": {}})

    def test_english_day_keys_only_renames(self) -> None:
        data = {"lundi": ["8h-12h"], "Mardi": {"start": "09:00"}, "extra": 1}
        self.assertEqual(
            english_day_keys(data),
            {"monday": ["8h-12h"], "tuesday": {"start": "09:00"}, "extra": 1},
        )
        with self.assertRaises(ScheduleDataError):
            english_day_keys({"sunday": {}, "dimanche": {}})


class TestMalformedSlots(unittest.TestCase):
    def test_parse_slot(self) -> None:
        self.assertEqual(parse_slot("09:00-12:30"), (540, 750))
        self.assertEqual(parse_slot(" 09:00 - 12:30 "), (540, 750))

    def test_malformed_slots_raise(self) -> None:
        for slot in ["0900-1200", "09:00", "aa:bb-cc:dd", "09:00-12:00-13:00", "25:00-26:00", None]:
            with self.subTest(slot=slot):
                with self.assertRaises(MalformedSlotError):
                    parse_slot(slot)

    def test_inverted_and_midnight_slots_raise(self) -> None:
        for slot in ["12:00-08:00", "22:00-02:00", "09:00-09:00"]:
            with self.subTest(slot=slot):
                with self.assertRaises(MalformedSlotError):
                    day_duration({"slots": [slot]})

    def test_malformed_slot_is_not_zeroed_in_week_total(self) -> None:
        with self.assertRaises(MalformedSlotError):
            week_total({"monday": {"slots": ["08:00-12:00"]}, "tuesday": {"slots": ["8h-12h"]}})

    def test_pause_longer_than_day(self) -> None:
        with self.assertRaises(ScheduleDataError):
            day_duration({"start": "09:00", "end": "10:00", "pause": "02:00"})


class TestValidateScheduleData(unittest.TestCase):
    def test_valid_schedule(self) -> None:
        data = {
            "monday": {"slots": ["08:00-12:00", "13:00-17:00"]},
            "tuesday": {"start": "09:00", "end": "17:00", "pause": "01:00"},
            "sunday": {},
        }
        self.assertEqual(validate_schedule_data(data), [])

    def test_collects_every_problem(self) -> None:
        data = {
            "monday": {"slots": ["08:00-12:00", "11:00-14:00"]},
            "tuesday": {"slots": ["18:00-02:00"]},
            "someday": {},
            "wednesday": {"start": "09:00"},
        }
        errors = validate_schedule_data(data)
        self.assertEqual(len(errors), 4)
        self.assertTrue(any("overlap" in error for error in errors))
        self.assertTrue(any(error.startswith("tuesday") for error in errors))

    def test_adjacent_slots_do_not_overlap(self) -> None:
        self.assertEqual(validate_schedule_data({"monday": {"slots": ["08:00-12:00", "12:00-13:00"]}}), [])

    def test_not_a_mapping(self) -> None:
        self.assertEqual(len(validate_schedule_data(["08:00-12:00"])), 1)


class TestValidators(unittest.TestCase):
    def test_day_and_role_normalization(self) -> None:
        self.assertEqual(normalize_day_key(" Dimanche "), "sunday")
        self.assertEqual(normalize_day_key("MONDAY"), "monday")
        self.assertEqual(normalize_role("Directeur"), "director")
        self.assertEqual(normalize_role(None), "")

    def test_format_minutes(self) -> None:
        self.assertEqual(format_minutes(450), "7h30")
        self.assertEqual(format_minutes(0), "0h00")


if __name__ == "__main__":
    unittest.main(verbosity=2)
