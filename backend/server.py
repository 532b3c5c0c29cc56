from fastapi import FastAPI, APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from starlette.middleware.cors import CORSMiddleware
import logging
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any, Literal

from config import GatewaySettings
from gateway import Gateway, build_gateway
from news.merge import from_client

settings = GatewaySettings.from_env()

# Create the main app without a prefix
app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============ MODELS ============

class AnalysisRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    news: List[Dict[str, Any]] = Field(default_factory=list)
    portfolio: List[str] = Field(default_factory=list)
    mode: Optional[Literal["per_article", "batch"]] = None


def get_gateway(request: Request) -> Gateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        gateway = build_gateway(settings)
        request.app.state.gateway = gateway
    return gateway


@app.on_event("startup")
async def startup_event():
    settings.log_config_check()
    if getattr(app.state, "gateway", None) is None:
        app.state.gateway = build_gateway(settings)
    logger.info("Gateway ready")


@app.on_event("shutdown")
async def shutdown_event():
    gateway = getattr(app.state, "gateway", None)
    if gateway is not None:
        await gateway.close()
        app.state.gateway = None

# ============ ROUTES ============

@api_router.get("/")
async def root():
    return {"message": "Envest Market Gateway API", "version": "1.0.0"}


@api_router.get("/health")
async def health(gateway: Gateway = Depends(get_gateway)):
    return {
        "status": "ok",
        "cache": gateway.cache.get_stats(),
        "providers": gateway.provider_status(),
    }


@api_router.get("/quote/{symbol}")
async def get_quote(symbol: str, gateway: Gateway = Depends(get_gateway)):
    if not symbol or not symbol.strip():
        raise HTTPException(status_code=400, detail="Symbol is required")

    quote = await gateway.quotes.resolve(symbol)
    return quote.to_response()


@api_router.get("/news")
async def get_news(q: Optional[str] = None, gateway: Gateway = Depends(get_gateway)):
    if not q or not q.strip():
        return RedirectResponse(url="/api/market-news", status_code=307)

    articles = await gateway.news.symbol_news(q.strip())
    return {"news": [a.to_dict() for a in articles]}


@api_router.get("/market-news")
async def get_market_news(gateway: Gateway = Depends(get_gateway)):
    news = await gateway.news.market_news()
    return news.to_response()


@api_router.post("/ai-analysis")
async def ai_analysis(request: AnalysisRequest, gateway: Gateway = Depends(get_gateway)):
    portfolio = [s.strip() for s in request.portfolio if s and s.strip()]
    if not request.news or not portfolio:
        raise HTTPException(status_code=400, detail="News and portfolio data are required")

    articles = [a for a in (from_client(item) for item in request.news) if a is not None]
    if not articles:
        raise HTTPException(status_code=400, detail="No news items with a title were provided")

    mode = request.mode or gateway.sentiment.default_mode
    results = await gateway.sentiment.analyze(articles, portfolio, mode=mode)

    response: Dict[str, Any] = {"analysis": [r.to_dict() for r in results]}
    if mode == "per_article":
        response["aggregate"] = gateway.sentiment.aggregate(results)
    return response


# Include the router in the main app
app.include_router(api_router)
