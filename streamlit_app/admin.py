"""Streamlit audit dashboard for root and analyst staff."""

import streamlit as st

from pickplay.core.security import verify_password
from pickplay.services.audit_service import AuditFilters, AuditRecorder
from pickplay.services.permissions import EntityKind, Operation, check_permission
from pickplay.services.user_service import get_user_by_login
from streamlit_app.common import DashboardSession, get_session, now_string

st.set_page_config(page_title="Audit", layout="wide")
st.title("Pick&Play / Audit trail")
st.caption(f"Last refresh: {now_string()}")

recorder = AuditRecorder()

with get_session() as db:
    current: DashboardSession | None = st.session_state.get("dashboard_session")
    if current is None:
        with st.form("login"):
            login = st.text_input("Username or email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
        if submitted:
            user = get_user_by_login(db, login)
            if user is None or not user.is_active or not verify_password(password, user.password_hash):
                st.error("Incorrect username or password")
            else:
                st.session_state["dashboard_session"] = DashboardSession(user.id, user.username, user.role_name)
                st.rerun()
        st.stop()

    decision = check_permission(current.role, EntityKind.AUDIT, Operation.LIST)
    if not decision.allowed:
        st.error(decision.message)
        st.stop()

    stats = recorder.aggregate(db)
    st.metric("Actions in window", stats.total_actions)
    left, middle, right = st.columns(3)
    left.subheader("By action")
    left.write(stats.by_action)
    middle.subheader("By user")
    middle.write(stats.by_actor)
    right.subheader("By product")
    right.write(stats.by_target)

    st.subheader("Log")
    actions = {action.name: action.id for action in recorder.list_actions(db)}
    selected = st.selectbox("Action", ["all", *actions.keys()])
    product_id = st.number_input("Product id (0 = any)", min_value=0, step=1, value=0)
    filters = AuditFilters(
        action_id=actions.get(selected),
        target_id=int(product_id) or None,
        limit=50,
    )
    st.dataframe(
        [
            {
                "when": view.timestamp,
                "user": view.actor_name,
                "action": view.action_name,
                "product": view.target_name,
            }
            for view in recorder.query(db, filters)
        ]
    )
