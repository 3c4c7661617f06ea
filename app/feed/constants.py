"""
Feed constants.

Fixed values, not configurable per request.
"""

from datetime import timedelta

# Trending: comments within the trailing window needed to flag a post
TRENDING_WINDOW = timedelta(hours=48)
TRENDING_MIN_COMMENTS = 10

# Latest-activity scan: how many of the newest comments per post are checked
# for one not written by the viewer
LATEST_COMMENT_SCAN_DEPTH = 10

# Listing sizes
SUBSCRIBED_FEED_LIMIT = 50
MAIN_FEED_LIMIT = 200
ACTIVITY_LIMIT = 20
