"""Hotel Ortus booking back-office API."""
