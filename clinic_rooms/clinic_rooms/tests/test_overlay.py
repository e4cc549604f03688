"""
Tests for scheduling/overlay.py

Tests fixed shift / one-off overlay, interval mathematics and range views.
"""

import unittest
from datetime import date, datetime

from pydantic import ValidationError

from clinic_rooms.clinic_rooms.doctype.fixed_shift.fixed_shift import FixedShift
from clinic_rooms.clinic_rooms.doctype.one_off_booking.one_off_booking import OneOffBooking, SubKind
from clinic_rooms.clinic_rooms.doctype.room.room import Room
from clinic_rooms.clinic_rooms.scheduling.overlay import (
	EventKind,
	get_day_summary,
	get_effective_schedule,
	merge_schedules,
	_interval_subtract,
)

# 2026-01-18 is a Sunday (day_of_week 0)
SUNDAY = date(2026, 1, 18)


def at(hour, minute=0, day=SUNDAY):
	return datetime(day.year, day.month, day.day, hour, minute)


class TestMergeSchedules(unittest.TestCase):
	"""Tests for merge_schedules."""

	def setUp(self):
		"""Set up rooms and a Sunday 08:00-14:00 shift for therapist A in room-1."""
		self.rooms = [
			Room(id="room-1", name="Blue"),
			Room(id="room-2", name="Purple"),
		]
		self.shift = FixedShift(
			id="fs-1",
			therapist_id="th-a",
			room_id="room-1",
			day_of_week=0,
			start_time="08:00",
			end_time="14:00",
		)

	def _booking(self, booking_id, start, end, therapist_id="th-b", room_id="room-1",
			day=SUNDAY, sub_kind="booking"):
		return OneOffBooking(
			id=booking_id,
			therapist_id=therapist_id,
			room_id=room_id,
			date=day,
			start_time=start,
			end_time=end,
			sub_kind=sub_kind,
		)

	def _fixed(self, events):
		return [event for event in events if event.kind == EventKind.FIXED]

	def _one_off(self, events):
		return [event for event in events if event.kind == EventKind.ONE_OFF]

	def test_no_one_offs_returns_full_shift(self):
		"""Without one-offs the fixed shift is returned uncut."""
		events = merge_schedules(self.rooms, [self.shift], [], SUNDAY)

		self.assertEqual(len(events), 1)
		event = events[0]
		self.assertEqual(event.id, "fixed-fs-1-0")
		self.assertEqual(event.original_ref_id, "fs-1")
		self.assertEqual(event.kind, EventKind.FIXED)
		self.assertIsNone(event.sub_kind)
		self.assertEqual(event.start, at(8))
		self.assertEqual(event.end, at(14))

	def test_shift_only_on_its_weekday(self):
		"""A Sunday shift does not appear on Monday."""
		events = merge_schedules(self.rooms, [self.shift], [], date(2026, 1, 19))
		self.assertEqual(events, [])

	def test_booking_in_the_middle_splits_shift(self):
		"""A 09:00-10:00 booking splits 08:00-14:00 into two fragments."""
		booking = self._booking("oo-1", "09:00", "10:00")

		events = merge_schedules(self.rooms, [self.shift], [booking], SUNDAY)

		fixed = self._fixed(events)
		self.assertEqual(len(fixed), 2)
		self.assertEqual((fixed[0].start, fixed[0].end), (at(8), at(9)))
		self.assertEqual((fixed[1].start, fixed[1].end), (at(10), at(14)))
		self.assertEqual([e.id for e in fixed], ["fixed-fs-1-0", "fixed-fs-1-1"])
		self.assertTrue(all(e.therapist_id == "th-a" for e in fixed))
		self.assertTrue(all(e.original_ref_id == "fs-1" for e in fixed))

		one_off = self._one_off(events)
		self.assertEqual(len(one_off), 1)
		self.assertEqual(one_off[0].id, "oneoff-oo-1")
		self.assertEqual(one_off[0].therapist_id, "th-b")
		self.assertEqual(one_off[0].sub_kind, SubKind.BOOKING)
		self.assertEqual((one_off[0].start, one_off[0].end), (at(9), at(10)))

		# One-offs come after the fixed fragments of the room
		self.assertEqual(events[-1].kind, EventKind.ONE_OFF)

	def test_booking_past_shift_end_keeps_leading_part(self):
		"""A 09:00-15:00 booking leaves only 08:00-09:00 of the shift."""
		booking = self._booking("oo-1", "09:00", "15:00")

		events = merge_schedules(self.rooms, [self.shift], [booking], SUNDAY)

		fixed = self._fixed(events)
		self.assertEqual(len(fixed), 1)
		self.assertEqual((fixed[0].start, fixed[0].end), (at(8), at(9)))
		self.assertEqual(len(self._one_off(events)), 1)

	def test_booking_covering_shift_suppresses_it(self):
		"""A booking that contains the whole shift leaves no fixed fragments."""
		booking = self._booking("oo-1", "07:00", "15:00")

		events = merge_schedules(self.rooms, [self.shift], [booking], SUNDAY)

		self.assertEqual(self._fixed(events), [])
		self.assertEqual(len(self._one_off(events)), 1)

	def test_end_of_day_shift(self):
		"""A shift ending at 24:00 runs until the next midnight and can be cut."""
		shift = FixedShift(id="fs-2", therapist_id="th-a", room_id="room-2", day_of_week=0,
			start_time="20:00", end_time="24:00")
		booking = self._booking("oo-1", "22:00", "24:00", room_id="room-2")

		events = merge_schedules(self.rooms, [shift], [booking], SUNDAY)

		fixed = self._fixed(events)
		self.assertEqual(len(fixed), 1)
		self.assertEqual((fixed[0].start, fixed[0].end), (at(20), at(22)))

		one_off = self._one_off(events)[0]
		self.assertEqual(one_off.end, at(0, day=date(2026, 1, 19)))
		self.assertAlmostEqual(one_off.duration_hours, 2)

	def test_identical_booking_suppresses_shift(self):
		"""A booking identical in time to the shift replaces it."""
		booking = self._booking("oo-1", "08:00", "14:00")

		events = merge_schedules(self.rooms, [self.shift], [booking], SUNDAY)

		self.assertEqual(len(events), 1)
		self.assertEqual(events[0].kind, EventKind.ONE_OFF)
		self.assertEqual(events[0].original_ref_id, "oo-1")

	def test_absence_cuts_like_booking(self):
		"""Absences cut fixed shifts exactly like bookings and keep their sub kind."""
		absence = self._booking("oo-1", "12:00", "14:00", therapist_id="th-a", sub_kind="absence")

		events = merge_schedules(self.rooms, [self.shift], [absence], SUNDAY)

		fixed = self._fixed(events)
		self.assertEqual(len(fixed), 1)
		self.assertEqual((fixed[0].start, fixed[0].end), (at(8), at(12)))
		self.assertEqual(self._one_off(events)[0].sub_kind, SubKind.ABSENCE)

	def test_adjacent_booking_does_not_cut(self):
		"""A booking touching the shift boundary leaves it intact."""
		before = self._booking("oo-1", "07:00", "08:00")
		after = self._booking("oo-2", "14:00", "15:00")

		events = merge_schedules(self.rooms, [self.shift], [before, after], SUNDAY)

		fixed = self._fixed(events)
		self.assertEqual(len(fixed), 1)
		self.assertEqual((fixed[0].start, fixed[0].end), (at(8), at(14)))
		self.assertEqual(len(self._one_off(events)), 2)

	def test_booking_in_other_room_does_not_cut(self):
		"""One-offs only cut shifts in their own room."""
		booking = self._booking("oo-1", "09:00", "10:00", room_id="room-2")

		events = merge_schedules(self.rooms, [self.shift], [booking], SUNDAY)

		fixed = self._fixed(events)
		self.assertEqual(len(fixed), 1)
		self.assertEqual((fixed[0].start, fixed[0].end), (at(8), at(14)))
		self.assertEqual(self._one_off(events)[0].room_id, "room-2")

	def test_booking_on_other_date_does_not_cut(self):
		"""A booking one week later does not cut this Sunday's shift."""
		booking = self._booking("oo-1", "09:00", "10:00", day=date(2026, 1, 25))

		events = merge_schedules(self.rooms, [self.shift], [booking], SUNDAY)

		self.assertEqual(len(events), 1)
		self.assertEqual(events[0].kind, EventKind.FIXED)

	def test_multiple_bookings_cut_cumulatively(self):
		"""Each booking cuts the fragments left by the previous ones."""
		bookings = [
			self._booking("oo-2", "11:00", "12:00"),
			self._booking("oo-1", "09:00", "10:00"),
		]

		events = merge_schedules(self.rooms, [self.shift], bookings, SUNDAY)

		fixed = sorted(self._fixed(events), key=lambda e: e.start)
		self.assertEqual(
			[(e.start, e.end) for e in fixed],
			[(at(8), at(9)), (at(10), at(11)), (at(12), at(14))]
		)
		self.assertEqual(len({e.id for e in fixed}), 3)

	def test_overlapping_bookings_are_not_merged(self):
		"""Competing one-offs are all emitted, even when they overlap."""
		bookings = [
			self._booking("oo-1", "09:00", "11:00"),
			self._booking("oo-2", "10:00", "12:00", therapist_id="th-c"),
		]

		events = merge_schedules(self.rooms, [self.shift], bookings, SUNDAY)

		one_off = self._one_off(events)
		self.assertEqual([e.id for e in one_off], ["oneoff-oo-1", "oneoff-oo-2"])
		fixed = self._fixed(events)
		self.assertEqual(
			[(e.start, e.end) for e in fixed],
			[(at(8), at(9)), (at(12), at(14))]
		)

	def test_cutting_invariants(self):
		"""Fixed fragments stay inside the day, never overlap each other or one-offs."""
		shifts = [
			self.shift,
			FixedShift(id="fs-2", therapist_id="th-c", room_id="room-1", day_of_week=0,
				start_time="15:00", end_time="19:00"),
			FixedShift(id="fs-3", therapist_id="th-d", room_id="room-2", day_of_week=0,
				start_time="10:00", end_time="18:00"),
		]
		bookings = [
			self._booking("oo-1", "09:30", "10:15"),
			self._booking("oo-2", "13:00", "16:00"),
			self._booking("oo-3", "10:00", "11:00", room_id="room-2", sub_kind="absence"),
			self._booking("oo-4", "17:30", "18:30", room_id="room-2"),
		]

		events = merge_schedules(self.rooms, shifts, bookings, SUNDAY)

		day_start = at(0)
		day_end = datetime(2026, 1, 19, 0, 0)
		for event in events:
			self.assertLess(event.start, event.end)
			self.assertGreaterEqual(event.start, day_start)
			self.assertLessEqual(event.end, day_end)

		fixed = self._fixed(events)
		one_off = self._one_off(events)

		for event in fixed:
			for other in one_off:
				if other.room_id == event.room_id:
					self.assertFalse(event.start < other.end and event.end > other.start)

			siblings = [e for e in fixed if e.original_ref_id == event.original_ref_id and e.id != event.id]
			for sibling in siblings:
				self.assertFalse(event.start < sibling.end and event.end > sibling.start)

	def test_idempotent(self):
		"""Calling merge_schedules twice with the same input gives the same output."""
		bookings = [self._booking("oo-1", "09:00", "10:00")]

		first = merge_schedules(self.rooms, [self.shift], bookings, SUNDAY)
		second = merge_schedules(self.rooms, [self.shift], bookings, SUNDAY)

		self.assertEqual(first, second)

	def test_inputs_are_not_mutated(self):
		"""Records and lists passed in are left untouched."""
		shifts = [self.shift]
		bookings = [self._booking("oo-1", "09:00", "10:00")]

		merge_schedules(self.rooms, shifts, bookings, SUNDAY)

		self.assertEqual(len(shifts), 1)
		self.assertEqual(self.shift.start_time.hour, 8)
		self.assertEqual(self.shift.end_time.hour, 14)

	def test_accepts_raw_records_and_date_string(self):
		"""Raw camelCase dicts from the persistence layer are validated and used."""
		events = merge_schedules(
			[{"id": "room-1", "name": "Blue"}],
			[{
				"id": "fs-1", "therapistId": "th-a", "roomId": "room-1",
				"dayOfWeek": 0, "startTime": "08:00", "endTime": "14:00"
			}],
			[{
				"id": "oo-1", "therapistId": "th-b", "roomId": "room-1",
				"date": "2026-01-18", "startTime": "09:00", "endTime": "10:00",
				"type": None
			}],
			"2026-01-18"
		)

		self.assertEqual(len(events), 3)
		self.assertEqual(events[-1].sub_kind, SubKind.BOOKING)

	def test_malformed_raw_record_fails(self):
		"""A raw record missing required fields raises a validation error."""
		with self.assertRaises(ValidationError):
			merge_schedules(
				self.rooms,
				[{"id": "fs-1", "roomId": "room-1", "dayOfWeek": 0, "startTime": "08:00", "endTime": "14:00"}],
				[],
				SUNDAY
			)

	def test_as_dict(self):
		"""as_dict returns JSON-ready values."""
		event = merge_schedules(self.rooms, [self.shift], [], SUNDAY)[0]

		data = event.as_dict()
		self.assertEqual(data["kind"], "fixed")
		self.assertEqual(data["start"], "2026-01-18T08:00:00")
		self.assertEqual(data["end"], "2026-01-18T14:00:00")
		self.assertEqual(event.duration_hours, 6)


class TestScheduleRanges(unittest.TestCase):
	"""Tests for get_effective_schedule and get_day_summary."""

	def setUp(self):
		self.rooms = [Room(id="room-1", name="Blue"), Room(id="room-2", name="Purple")]
		self.shifts = [
			FixedShift(id="fs-1", therapist_id="th-a", room_id="room-1", day_of_week=0,
				start_time="08:00", end_time="14:00"),
			FixedShift(id="fs-2", therapist_id="th-b", room_id="room-2", day_of_week=0,
				start_time="07:00", end_time="09:00"),
		]

	def test_effective_schedule_only_days_with_events(self):
		"""Only Sundays appear in a two-week range."""
		result = get_effective_schedule(self.rooms, self.shifts, [], "2026-01-12", "2026-01-25")

		self.assertEqual(list(result.keys()), ["2026-01-18", "2026-01-25"])
		self.assertEqual(len(result["2026-01-18"]), 2)

	def test_effective_schedule_includes_one_off_days(self):
		"""A one-off on a weekday adds that day to the range result."""
		booking = OneOffBooking(id="oo-1", therapist_id="th-a", room_id="room-2",
			date="2026-01-14", start_time="10:00", end_time="11:00")

		result = get_effective_schedule(self.rooms, self.shifts, [booking], "2026-01-12", "2026-01-18")

		self.assertEqual(list(result.keys()), ["2026-01-14", "2026-01-18"])

	def test_effective_schedule_invalid_range(self):
		"""start_date after end_date is rejected."""
		with self.assertRaises(ValueError):
			get_effective_schedule(self.rooms, self.shifts, [], "2026-01-20", "2026-01-10")

	def test_day_summary_sorted_by_start(self):
		"""The day summary is ordered by start time across rooms."""
		events = get_day_summary(self.rooms, self.shifts, [], SUNDAY)

		self.assertEqual([e.original_ref_id for e in events], ["fs-2", "fs-1"])


class TestIntervalSubtract(unittest.TestCase):
	"""Tests for the interval subtraction helper."""

	def setUp(self):
		self.interval = {"start": at(9), "end": at(12)}

	def test_interval_subtract_no_overlap(self):
		"""Test subtracting interval with no overlap."""
		result = _interval_subtract(self.interval, {"start": at(14), "end": at(15)})
		self.assertEqual(result, [self.interval])

	def test_interval_subtract_covers_all(self):
		"""Test subtracting interval that covers all."""
		result = _interval_subtract(self.interval, {"start": at(8), "end": at(13)})
		self.assertEqual(result, [])

	def test_interval_subtract_start(self):
		"""Test subtracting interval that covers start."""
		result = _interval_subtract(self.interval, {"start": at(8), "end": at(10)})
		self.assertEqual(result, [{"start": at(10), "end": at(12)}])

	def test_interval_subtract_end(self):
		"""Test subtracting interval that covers end."""
		result = _interval_subtract(self.interval, {"start": at(11), "end": at(13)})
		self.assertEqual(result, [{"start": at(9), "end": at(11)}])

	def test_interval_subtract_middle(self):
		"""Test subtracting interval in the middle (splits in two)."""
		result = _interval_subtract(self.interval, {"start": at(10), "end": at(11)})
		self.assertEqual(result, [
			{"start": at(9), "end": at(10)},
			{"start": at(11), "end": at(12)},
		])
