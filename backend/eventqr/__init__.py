"""EventQR backend: events, QR registration pages and attendee registrations."""
