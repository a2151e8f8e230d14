"""Streamlit customer storefront: pick rental items and check out."""

import streamlit as st

from pickplay.core.errors import DomainError
from pickplay.services.catalog_service import list_active_payment_methods, list_products
from pickplay.services.order_service import submit_order
from streamlit_app.common import build_order_lines, format_money, get_session

st.set_page_config(page_title="Pick&Play", layout="centered")
st.title("Pick&Play / Rent")

with get_session() as db:
    products = list_products(db, active_only=True)
    payment_methods = list_active_payment_methods(db)
    if not products or not payment_methods:
        st.warning("The catalog is not ready yet. Please come back later.")
        st.stop()

    customer_name = st.text_input("Your name")
    method_map = {method.name: method.id for method in payment_methods}
    selected_method = st.selectbox("Payment method", list(method_map.keys()))

    quantities: dict[int, int] = {}
    for product in products:
        quantities[product.id] = st.number_input(
            f"{product.name} - {format_money(product.price)}",
            min_value=0,
            step=1,
            value=0,
            key=f"qty_{product.id}",
        )

    if st.button("Place order"):
        try:
            summary = submit_order(
                db,
                customer_name=customer_name,
                payment_method_id=method_map[selected_method],
                lines=build_order_lines(quantities),
            )
        except DomainError as exc:
            st.error(exc.message)
        else:
            st.success(f"Order #{summary.order_id} placed. Total: {format_money(summary.total)}")
