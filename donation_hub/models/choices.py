LISTING_STATUSES = ("pending", "approved", "matched", "rejected")
MATCH_STATUSES = ("active", "completed", "cancelled")

# listings anonymous visitors may see
PUBLIC_STATUSES = ("approved",)
FEED_STATUSES = ("approved", "matched")
