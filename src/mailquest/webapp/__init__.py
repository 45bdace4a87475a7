"""Flask JSON API over the Mailquest game engine."""
