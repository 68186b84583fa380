"""
Streamlit Frontend for the Financial Assistant

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every number shown comes from a deterministic tool result
3. Clear error messages in simple language
4. The AI page is optional; everything else works without an API key

Run with:
    streamlit run app/main.py
"""

import asyncio
from datetime import date
from pathlib import Path

import streamlit as st

from fin_assistant.audit import create_correlation_id
from fin_assistant.capabilities import FinancialCapabilities
from fin_assistant.config import get_settings, validate_all_settings
from fin_assistant.models.results import ToolResult
from fin_assistant.orchestrator import AssistantFlow, create_app_components


# Page configuration
st.set_page_config(
    page_title="Financial Assistant",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components(use_ai=True)


def render_result(result: ToolResult):
    """Show a tool result as a success or error box, with the raw payload below."""
    box = "success-box" if result.success else "error-box"
    title = "✅ Result" if result.success else "❌ Could not complete"
    st.markdown(f"""
    <div class="{box}">
        <h4>{title}</h4>
        <p>{result.message}</p>
    </div>
    """, unsafe_allow_html=True)
    
    with st.expander("🔍 Details"):
        if result.details:
            st.code(result.details)
        st.json(result.to_payload())


def main():
    """Main application entry point."""
    capabilities, assistant_flow = get_components()
    
    st.sidebar.title("💰 Financial Assistant")
    st.sidebar.markdown("---")
    
    page = st.sidebar.radio(
        "Navigate to:",
        ["📤 Upload CSV", "❓ Ask Question", "📊 Analyze", "🧾 Tax Calculator", "⚙️ Settings"],
        index=0,
    )
    
    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Upload your transaction CSV
        2. Ask questions or run an analysis
        
        **Ask questions like:**
        - "How much did I spend on Coffee last week?"
        - "What is my tax on 15 lakh under the new regime?"
        """
    )
    
    if page == "📤 Upload CSV":
        render_upload_page(capabilities)
    elif page == "❓ Ask Question":
        render_query_page(assistant_flow)
    elif page == "📊 Analyze":
        render_analysis_page(capabilities)
    elif page == "🧾 Tax Calculator":
        render_tax_page(capabilities)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_upload_page(capabilities: FinancialCapabilities):
    """Render the CSV upload page."""
    st.title("📤 Upload Transactions")
    st.markdown(
        "Upload a CSV with the columns **Date, Description, Amount, Category, Type** "
        "(Type is `Expense` or `Income`)."
    )
    
    uploaded = st.file_uploader("Transaction CSV", type=["csv"])
    context_name = st.text_input(
        "Context name",
        placeholder="e.g., my_transactions (defaults to the file name)",
    )
    
    if uploaded is not None and st.button("💾 Process CSV", type="primary"):
        upload_dir = Path(get_settings().app.data_dir) / "uploads"
        upload_dir.mkdir(parents=True, exist_ok=True)
        csv_path = upload_dir / Path(uploaded.name).name
        csv_path.write_bytes(uploaded.getvalue())
        
        with st.spinner("Processing..."):
            result = run_async(capabilities.ingest_csv(
                csvFilePath=str(csv_path),
                contextName=context_name.strip() or None,
            ))
        render_result(result)


def render_query_page(assistant_flow: AssistantFlow):
    """Render the question page."""
    st.title("❓ Ask a Question")
    
    if assistant_flow is None:
        st.warning(
            "The AI assistant is not configured. Set `GOOGLE_AI_API_KEY` in your "
            "environment or `.env` file. The Analyze and Tax pages still work."
        )
        return
    
    with st.expander("📝 Example Questions"):
        st.markdown("""
        - "How much did I spend on Coffee last week in my_transactions?"
        - "How many Income transactions do I have this year?"
        - "What is my average Food expense this month?"
        - "What is my tax slab if my income is 1500000 under the new regime?"
        """)
    
    question = st.text_input(
        "Your question:",
        placeholder="e.g., How much did I spend on Coffee last week?",
    )
    
    if st.button("🔍 Get Answer", type="primary") and question:
        with st.spinner("Looking up your records..."):
            answer, tool_call, result = run_async(
                assistant_flow.answer_question(
                    question=question,
                    correlation_id=create_correlation_id(),
                )
            )
        
        box = "success-box" if result is not None and result.success else "info-box"
        st.markdown(f"""
        <div class="{box}">
            <h4>📊 Answer</h4>
            <p>{answer}</p>
        </div>
        """, unsafe_allow_html=True)
        
        with st.expander("🔍 Tool Details"):
            st.markdown(f"**Tool:** {tool_call.tool}")
            st.json(tool_call.arguments)
            if result is not None:
                st.json(result.to_payload())


def render_analysis_page(capabilities: FinancialCapabilities):
    """Render the explicit-filter analysis page."""
    st.title("📊 Analyze Transactions")
    
    contexts = run_async(capabilities.list_contexts())
    if not contexts:
        st.info("No transaction contexts yet. Use the 'Upload CSV' page first.")
        return
    
    col1, col2, col3 = st.columns(3)
    with col1:
        context_name = st.selectbox("Context", options=contexts)
        aggregation = st.selectbox("Aggregation", options=["sum", "count", "average"])
    with col2:
        category = st.text_input("Category", placeholder="e.g., Coffee")
        transaction_type = st.selectbox(
            "Type",
            options=[None, "Expense", "Income"],
            format_func=lambda x: "All Types" if x is None else x,
        )
    with col3:
        time_period = st.selectbox(
            "Time period",
            options=[None, "last week", "last month", "this month", "this year", "custom"],
            format_func=lambda x: "All Time" if x is None else x.title(),
        )
        start_date = end_date = None
        if time_period == "custom":
            start_date = st.date_input("From", value=date.today().replace(day=1))
            end_date = st.date_input("To", value=date.today())
    
    if st.button("▶️ Run", type="primary"):
        arguments = {
            "contextName": context_name,
            "aggregation": aggregation,
            "category": category.strip() or None,
            "transactionType": transaction_type,
        }
        if time_period == "custom":
            arguments["startDate"] = start_date.isoformat()
            arguments["endDate"] = end_date.isoformat()
        elif time_period:
            arguments["timePeriod"] = time_period
        
        result = run_async(capabilities.analyze_transactions(**arguments))
        render_result(result)


def render_tax_page(capabilities: FinancialCapabilities):
    """Render the tax calculator page."""
    st.title("🧾 Income Tax Calculator")
    st.markdown("India, FY 2024-25 (AY 2025-26). Includes the 87A rebate and 4% cess.")
    
    app_settings = get_settings().app
    col1, col2, col3 = st.columns(3)
    with col1:
        income = st.number_input("Taxable income (₹)", min_value=0.0, step=10000.0)
    with col2:
        age = st.number_input("Age", min_value=0, max_value=150, value=app_settings.default_age)
    with col3:
        regime = st.radio(
            "Regime",
            options=["new", "old"],
            index=0 if app_settings.default_tax_regime == "new" else 1,
            horizontal=True,
        )
    
    if st.button("🧮 Calculate", type="primary"):
        result = run_async(capabilities.calculate_tax(
            incomeAmount=income,
            age=int(age),
            taxRegime=regime,
        ))
        render_result(result)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")
    st.markdown("### Connection Status")
    
    status = validate_all_settings()
    
    checks = [
        ("Gemini (AI)", "gemini"),
        ("Application settings", "app"),
        ("Tax slab table", "tax_slabs"),
    ]
    for name, key in checks:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")
    
    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Create a `.env` file with `GOOGLE_AI_API_KEY` to enable questions. "
        "Storage location and defaults use the `FIN_ASSISTANT_` prefix "
        "(see `.env.example`)."
    )


if __name__ == "__main__":
    main()
