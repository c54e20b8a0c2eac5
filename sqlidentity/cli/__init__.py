"""`sqlid` administration command line."""
