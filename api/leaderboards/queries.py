"""
Named leaderboard queries.

Both use RANK(): equal totals share a rank and the next distinct total skips
ahead (100, 100, 50 -> 1, 1, 3).
"""

from __future__ import annotations

STEP_LEADERS = """
SELECT
  RANK() OVER (ORDER BY SUM(steps) DESC) AS rank,
  steps.name,
  charity_name,
  fundraising_link,
  SUM(steps) AS steps
FROM steps
LEFT JOIN profiles USING (user_id)
GROUP BY steps.name, user_id, charity_name, fundraising_link
ORDER BY rank ASC, steps.name ASC
"""

DONATION_LEADERS = """
SELECT
  RANK() OVER (ORDER BY total_donations DESC) AS rank,
  name,
  charity_name,
  fundraising_link,
  total_donations
FROM profiles
GROUP BY name, user_id, charity_name, fundraising_link
ORDER BY rank ASC, name ASC
"""
