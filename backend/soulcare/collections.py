"""Document collection names.

MongoDB creates collections on first write, so these constants are the only
place the "schema" of the store is named.
"""

USERS = "users"
COURSES = "courses"
LESSONS = "lessons"
EVENTS = "events"
MEMBERSHIP_TIERS = "membership_tiers"
BLOGS = "blogs"
SOUL_CARE_SERVICES = "soul_care_services"
SOUL_CARE_TEAM = "soul_care_team"
SOUL_CARE_RESOURCES = "soul_care_resources"
SITE_SETTINGS = "site_settings"
NEWSLETTER_SUBSCRIPTIONS = "newsletter_subscriptions"
VERIFICATION_CODES = "verification_codes"
