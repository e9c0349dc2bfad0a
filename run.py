"""
Run the Creative Analytics API
"""
import uvicorn
from creative_analytics.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "creative_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=(settings.log_level or "info").lower(),
    )
