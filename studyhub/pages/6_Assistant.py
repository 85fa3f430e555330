# 6_Assistant.py

import streamlit as st

from core.chat import ChatConversation
from session import get_ai, new_cancel_token, require_user, state
from sidebar import render_sidebar

st.set_page_config(page_title="Assistant · StudyHub", page_icon="💬")
require_user()
render_sidebar()

st.title("Study Assistant 💬", anchor=False)

if "conversation" not in state:
    state.conversation = ChatConversation(get_ai())

with st.sidebar:
    if st.button("Clear chat", icon=":material/delete_sweep:"):
        state.conversation.clear()
        st.rerun()

for msg in state.conversation.messages:
    st.chat_message(msg.role).write(msg.content)

if prompt := st.chat_input("Ask a question about your studies"):
    st.chat_message("user").write(prompt)
    with st.spinner("Thinking..."):
        reply = state.conversation.send(prompt, cancel=new_cancel_token("chat"))
    if reply is not None:
        st.chat_message("assistant").write(reply.content)
