"""40Weeks pregnancy tracking API."""
