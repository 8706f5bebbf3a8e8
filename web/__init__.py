"""Flask front end for Gap Writer."""
