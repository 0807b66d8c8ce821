"""Streamlit GUI for the covered call screener.

Run with: streamlit run app.py
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from cc_screener.analytics.analyzer import CoveredCallAnalyzer
from cc_screener.analytics.market_hours import is_market_open
from cc_screener.config import AnalyzerConfig, resolve_api_token
from cc_screener.data.gateway import TradierAPI
from cc_screener.output.console import candidates_to_records
from cc_screener.utils.error_handling import CCToolError, ConfigurationError, GatewayError

# Page config
st.set_page_config(
    page_title="Covered Call Screener",
    page_icon="📞",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("📞 Covered Call Screener")
st.markdown("*Break-even, assignment gain and time-adjusted return for near-the-money calls*")

# Sidebar - Configuration
st.sidebar.header("⚙️ Configuration")

ticker = st.sidebar.text_input("Ticker", value="AAPL").strip().upper()
expiration = st.sidebar.text_input(
    "Expiration (YYYY-MM-DD)",
    value="",
    help="Leave empty for the nearest expiration"
)
sandbox = st.sidebar.checkbox("Use sandbox API", value=True)
api_key = st.sidebar.text_input("Tradier API token", type="password",
                                help="Leave empty to use TRADIER_SANDBOX_TOKEN / TRADIER_TOKEN")

price_ceiling_offset = st.sidebar.slider(
    "Strike ceiling above price ($)",
    min_value=1.0,
    max_value=50.0,
    value=10.0,
    step=1.0,
    help="Calls with strike at or above price + this offset are excluded"
)

st.sidebar.markdown(f"Market is **{'open' if is_market_open() else 'closed'}**")

if st.sidebar.button("🚀 Run Screening", type="primary"):
    try:
        config = AnalyzerConfig(price_ceiling_offset=price_ceiling_offset, sandbox=sandbox)
        api = TradierAPI(resolve_api_token(api_key or None, sandbox=sandbox), sandbox=sandbox)
    except ConfigurationError as e:
        st.error(f"❌ {e}")
        st.stop()

    analyzer = CoveredCallAnalyzer(api, config)

    with st.spinner(f"Fetching {ticker} option chain..."):
        try:
            result = analyzer.analyze(ticker, expiration or None)
        except CCToolError as e:
            st.error(f"❌ {e.name}: {e}")
            st.stop()
        except GatewayError as e:
            st.error(f"❌ Error fetching {ticker}: {e}")
            st.stop()

    st.success(
        f"✅ {len(result.options_chain)} candidates for {result.quote.ticker} "
        f"expiring {result.expiration_date} (share price ${result.quote.last_price:.2f})"
    )

    st.header("📊 Results")
    df = pd.DataFrame(candidates_to_records(result.options_chain))
    st.dataframe(df, use_container_width=True, hide_index=True)

    if not df.empty:
        st.header("📈 Assignment Gain by Strike")
        fig = go.Figure()
        fig.add_trace(go.Bar(
            x=df['Strike'],
            y=df['Assignment Gain'],
            marker_color=['#2ca02c' if itm else '#1f77b4' for itm in df['ITM']],
            name='Assignment Gain'
        ))
        fig.add_vline(x=result.quote.last_price, line_dash="dash", annotation_text="Price")
        fig.update_layout(xaxis_title="Strike", yaxis_title="Gain per contract ($)")
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Expiration Weeks")
    for week in result.expiration_dates:
        st.write(", ".join(d.strftime('%Y-%m-%d') for d in week))
else:
    st.info("👈 Enter a ticker and run the screening to get started")
