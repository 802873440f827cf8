"""
Streamlit Frontend for the Tax Calculator

Screens:
1. Log in (or register a new account)
2. Enter income and deduction figures
3. See the tax payable and how it was computed

DESIGN PRINCIPLES:
1. Nothing is calculated before a successful login
2. Inputs are non-negative at the form level
3. Every figure shown comes from the engine's breakdown
"""

from decimal import Decimal

import streamlit as st

from src.models.tax import IncomeRecord, RateTable
from src.orchestrator import (
    LoginFlow,
    TaxCalculationFlow,
    create_app_components,
)
from src.services.tax import InvalidRateTableError


# Page configuration
st.set_page_config(
    page_title="Personal Income Tax Calculator",
    page_icon="🧮",
    layout="centered",
)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    components = get_components()

    if "session_id" not in st.session_state:
        st.session_state.session_id = None
    if "username" not in st.session_state:
        st.session_state.username = None

    if st.session_state.session_id is None:
        render_login_page(components.login_flow)
        return

    st.sidebar.title("🧮 Tax Calculator")
    st.sidebar.markdown(f"Logged in as **{st.session_state.username}**")
    if st.sidebar.button("Log out"):
        st.session_state.session_id = None
        st.session_state.username = None
        st.session_state.pop("breakdown", None)
        st.rerun()

    page = st.sidebar.radio(
        "Navigate to:",
        ["Calculate Tax", "Rate Table"],
        index=0,
    )

    if page == "Calculate Tax":
        render_calculator_page(components.tax_flow)
    else:
        render_rate_table_page(components.tax_flow.rate_table)


def render_login_page(login_flow: LoginFlow):
    """Render the login / registration page."""
    st.title("Personal Income Tax Calculator")

    login_tab, register_tab = st.tabs(["Log in", "Register"])

    with login_tab:
        with st.form("login_form"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")

        if submitted:
            session_id = login_flow.login(username, password)
            if session_id is None:
                st.error("Invalid username or password.")
            else:
                st.session_state.session_id = session_id
                st.session_state.username = username
                st.rerun()

    with register_tab:
        with st.form("register_form"):
            new_username = st.text_input("Choose a username")
            new_password = st.text_input("Choose a password", type="password")
            registered = st.form_submit_button("Register")

        if registered:
            ok, message = login_flow.register(new_username, new_password)
            if ok:
                st.success(message)
            else:
                st.error(message)


def _amount_input(label: str, key: str) -> Decimal:
    value = st.number_input(
        label,
        min_value=0.0,
        value=0.0,
        step=100.0,
        format="%.2f",
        key=key,
    )
    return Decimal(str(value))


def render_calculator_page(tax_flow: TaxCalculationFlow):
    """Render the calculation form and its result."""
    st.title("Calculate Tax")
    st.markdown(
        f"Standard deduction: **{tax_flow.engine.standard_deduction:,.2f}**"
    )

    with st.form("tax_form"):
        col1, col2 = st.columns(2)
        with col1:
            salary = _amount_input("Salary income", "salary_income")
            bonus = _amount_input("Bonus income", "bonus_income")
        with col2:
            social_security = _amount_input("Social security", "social_security")
            provident_fund = _amount_input("Housing provident fund", "provident_fund")
            other = _amount_input("Other deductions", "other_deductions")
        submitted = st.form_submit_button("Calculate", type="primary")

    if submitted:
        record = IncomeRecord(
            salary_income=salary,
            bonus_income=bonus,
            social_security=social_security,
            provident_fund=provident_fund,
            other_deductions=other,
        )
        try:
            st.session_state.breakdown = tax_flow.calculate(
                record,
                correlation_id=st.session_state.session_id,
            )
        except InvalidRateTableError as e:
            st.session_state.pop("breakdown", None)
            st.error(f"The configured rate table is invalid: {e}")

    breakdown = st.session_state.get("breakdown")
    if breakdown is None:
        return

    st.markdown("---")
    st.metric("Tax Payable", f"{breakdown.tax_payable:,.2f}")
    if breakdown.is_taxable and not breakdown.bracket_matched:
        st.warning(
            "No bracket of the rate table covers this taxable income; "
            "tax was set to 0. Check the rate table."
        )
    st.code(breakdown.to_report(), language=None)


def render_rate_table_page(rate_table: RateTable):
    """Render the active rate table and its consistency checks."""
    st.title("Rate Table")

    rows = [
        {
            "Lower bound": f"{b.lower_bound:,.2f}",
            "Upper bound": "∞" if b.is_unbounded else f"{b.upper_bound:,.2f}",
            "Rate": f"{b.rate * 100:.0f}%",
            "Quick deduction": f"{b.quick_deduction:,.2f}",
        }
        for b in rate_table.brackets
    ]
    st.table(rows)

    issues = rate_table.partition_issues() + rate_table.continuity_issues()
    if issues:
        st.warning("The rate table has problems:\n\n" + "\n".join(f"- {i}" for i in issues))
    else:
        st.success("Brackets cover all incomes and the tax is continuous at every boundary.")


if __name__ == "__main__":
    main()
