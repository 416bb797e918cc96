import os

from dotenv import load_dotenv

load_dotenv()

# Configurations for the market watcher
TRADING_FREQUENCY_MS = 5*60*1000  # frequency of market evaluations in milliseconds
TRADE_INTERVAL = "5m"  # candle period requested from the exchange
CANDLE_LIMIT = 100  # number of candles fetched per evaluation
MAX_THREADS = 10  # number of markets evaluated at a time
RETRIES = 3  # number of retries for API requests
BACK_OFF_FACTOR = 2  # exponential backoff factor for retries in seconds


# Configuration for Critical Point Detection
WINDOW_HALF_WIDTH = 3  # number of candles compared front and back in windowed mode

# Configuration for Support Band Detection
CLUSTER_THRESHOLD = 0.05  # maximum relative gap for a price to join the running band
CHART_THRESHOLD = 0.01  # tighter gap used when clustering all four prices for charts
STRONG_BAND_WEIGHT = 3  # minimum merged points for a band to be used in brackets

# Configuration for Signal Decision
BUY_POSITION = "0.10"  # BUY when price sits in the lowest 10% of the bracket
SELL_POSITION = "0.90"  # SELL when price sits in the highest 10% of the bracket

# Configuration for display fits
TREND_ITERATIONS = 100  # gradient descent steps for the trend line
TREND_LEARNING_RATE = 0.5  # learning rate on the rescaled trend problem
WAVE_DEGREE = 10  # polynomial degree of the wave smoothing


# Environment
MARKETS = [m.strip().upper() for m in os.getenv("MARKETS", "BTC/USDT").split(",") if m.strip()]
BINANCE_BASE_URL = os.getenv("BINANCE_BASE_URL", "https://api.binance.com")
BINANCE_API_KEY = os.getenv("BINANCE_API_KEY")
BINANCE_SECRET_KEY = os.getenv("BINANCE_SECRET_KEY")
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID")
CHART_DIR = os.getenv("CHART_DIR")  # charts are only exported when set
BALANCE_AWARE = os.getenv("BALANCE_AWARE", "false").lower() in ("1", "true", "yes")
LOG_DB_PATH = os.getenv("LOG_DB_PATH")  # sqlite log sink, console only when unset
