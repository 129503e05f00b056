"""
Clients Supabase partagés (catalogue en lecture, commandes en écriture).
- get_supabase: client 'anon' pour les lectures publiques (catalogue).
- get_service_supabase: client service-role pour l'écriture des commandes.
- is_configured: permet aux repositories de basculer sur les données embarquées.
"""
from typing import Optional
from supabase import create_client, Client
from reservation.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def is_configured() -> bool:
    return bool(SUPABASE_URL and (SUPABASE_ANON or SUPABASE_SERVICE_KEY))

def get_supabase() -> Client:
    global _supabase
    if not SUPABASE_URL or not SUPABASE_ANON:
        raise RuntimeError("SUPABASE_URL / SUPABASE_ANON_KEY manquants pour get_supabase()")
    if _supabase is None:
        _supabase = create_client(SUPABASE_URL, SUPABASE_ANON)
    return _supabase

def get_service_supabase() -> Client:
    global _service_supabase
    if not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase
