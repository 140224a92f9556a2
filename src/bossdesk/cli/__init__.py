"""bossdesk command line (``bossdesk``)."""
