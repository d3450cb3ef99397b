"""
Seva+
=====

Back-office API for sanitation and crowd-management staff at mega-events,
plus the public website backend (bilingual content and contact form).

Bounded contexts:
- identity: sign-in via the managed identity provider, bearer auth
- workforce: staff, teams, shifts, headcounts and coverage
- operations: facilities, tasks, issues with SLA tracking, QR codes
- outreach: notifications and ads
- analytics: summaries and CSV exports
- site: public content and contact relay
"""

__version__ = "1.0.0"
