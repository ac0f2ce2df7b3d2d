"""Reviews app: ratings and comments users leave for PG listings."""
