"""
Outreach Module
===============

Staff notifications (queued for an external channel provider) and ads /
announcements with an approval step.
"""
