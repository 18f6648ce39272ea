"""HTTP routes of the Fiscozen parser backend."""
