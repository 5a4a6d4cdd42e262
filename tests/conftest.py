from datetime import date

import pytest


SAMPLE_PLAN = """Here is your personalized treatment plan:

1. Your Starting Point (Today): Pain sits at 6/10 after long desk days.
You can still walk the dog each morning.

2. What's Going On (Assessment Findings):
   * Clinical findings: Tight upper trapezius & levator scapulae
   * In plain English: The neck muscles are working overtime.

3. Where You Want to Get To (Goals):
Sit through a full workday with pain under 3/10.
Turn your head fully when reversing the car.
Sleep through the night without waking from neck pain.

4. Do This Now (Your 1–3 Key Actions for the Week):
Take a 2-minute posture break every hour.
Do 3 chin tucks before lunch and dinner.
Use a heat pack for 10 minutes each evening.

5. Treatment Plan:
**Getting You Comfortable** (Acute Phase, 2-4 weeks):
Your tight upper trapezius is driving the neck pain.
We will use trigger point release and myofascial work.
Recommended: 2x/week

**Keeping You at Your Best** (Maintenance, Ongoing):
Regular massage keeps desk tension from building up again.
Recommended: 1x/month

6. How We'll Measure Progress: Pain score and neck rotation range.

7. What to Expect in the Next 72 Hours:
Mild soreness for a day is normal.
Sharp or worsening pain is not expected, so call us.

8. Recommended Appointments: Twice weekly for 3 weeks, then monthly.
"""


@pytest.fixture
def sample_plan() -> str:
    return SAMPLE_PLAN


@pytest.fixture
def fixed_day() -> date:
    return date(2025, 3, 7)


@pytest.fixture
def booking_urls():
    return {"Elle Badrak": "https://bookings.example.com/?p=530&src=qr"}
