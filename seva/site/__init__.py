"""
Site Bounded Context
====================

Backend for the public bilingual website: page copy, the pilot-request
contact form and the staffing demo. No route here requires sign-in.
"""
