"""Trade Journal: personal trading journal with live per-user sync."""
