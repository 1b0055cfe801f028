"""Email digest queue: scheduling, dispatch and delivery bookkeeping."""
