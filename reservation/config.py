# reservation.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

"""
Configuration centrale du service de réservation.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose le répertoire des templates (pages de lancement / retour paiement)
- Normalise et expose les secrets/URLs (Supabase, passerelle KISPG), sécurité cookies, CORS/hosts
- Fournit la politique du handshake de paiement (timeout, intervalle du watchdog)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / sessions
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "replace_me_with_a_long_random_secret")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Origine propre de l'application et origine de l'API (liste blanche des messages PAYMENT_RESULT)
BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/")
API_ORIGIN = _clean_env(os.getenv("API_ORIGIN") or "").rstrip("/")

# Passerelle KISPG: endpoint fixe, identifiant marchand et clé de signature
KISPG_URL = _clean_env(os.getenv("KISPG_URL") or "https://testapi.kispg.co.kr/v2/auth")
KISPG_MID = _clean_env(os.getenv("KISPG_MID") or "kistest00m")
KISPG_MERCHANT_KEY = _clean_env(os.getenv("KISPG_MERCHANT_KEY") or "")
KISPG_RETURN_PATH = os.getenv("KISPG_RETURN_PATH", "/payment/kispg-return")

# Handshake: watchdog de fermeture du popup et délai maximal sans résultat (0 = illimité)
PAYMENT_POPUP_POLL_MS = _int_env("PAYMENT_POPUP_POLL_MS", 500)
PAYMENT_RESULT_TIMEOUT_SECONDS = _int_env("PAYMENT_RESULT_TIMEOUT_SECONDS", 900)

# Réconciliation du statut de commande (page de retour)
PAYMENT_STATUS_POLL_SECONDS = _int_env("PAYMENT_STATUS_POLL_SECONDS", 3)
PAYMENT_STATUS_MAX_POLLS = _int_env("PAYMENT_STATUS_MAX_POLLS", 10)

# Devis en mémoire: inactivité maximale et nombre de devis conservés (0 = sans limite)
ESTIMATE_TTL_SECONDS = _int_env("ESTIMATE_TTL_SECONDS", 3600)
ESTIMATE_MAX_ENTRIES = _int_env("ESTIMATE_MAX_ENTRIES", 10000)
