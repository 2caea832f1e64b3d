import os
from dotenv import load_dotenv

load_dotenv()

ai_match_rounds = int(os.getenv("AI_MATCH_ROUNDS") or 5)
ai_match_expiry_minutes = int(os.getenv("AI_MATCH_EXPIRY_MINUTES") or 60)
openrouter_api_key = os.getenv("OPENROUTER_API_KEY", "").strip()
openrouter_base_url = os.getenv("OPENROUTER_BASE_URL") or "https://openrouter.ai/api/v1"
openrouter_model = (
    os.getenv("OPENROUTER_MODEL") or "mistralai/mistral-small-3.2-24b-instruct:free"
)
openrouter_timeout_seconds = float(os.getenv("OPENROUTER_TIMEOUT_SECONDS") or 20)
openrouter_app_title = os.getenv("OPENROUTER_APP_TITLE") or "GeoFinder AI Duel"
openrouter_referer = os.getenv("OPENROUTER_REFERER", "")
app_check_enabled = os.getenv("APP_CHECK_ENABLED", "true").lower() not in ("0", "false", "no")
app_check_tokens = [
    token.strip() for token in os.getenv("APP_CHECK_TOKENS", "").split(",") if token.strip()
]
ai_testing_key = os.getenv("AI_TESTING_KEY", "")
image_catalogue_path = os.getenv("IMAGE_CATALOGUE_PATH", "")
image_prefetch_size = int(os.getenv("IMAGE_PREFETCH_SIZE") or 15)

if __name__ == "__main__":
    print(ai_match_rounds, ai_match_expiry_minutes, openrouter_base_url, openrouter_model)
