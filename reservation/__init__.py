"""Devis de réservation (chambres, séminaires) et paiement KISPG par popup."""
