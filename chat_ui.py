import streamlit as st

from openai_chat.client.chat_session import ChatController
from openai_chat.endpoint.openai_entities import MAX_MAX_TOKENS, MIN_MAX_TOKENS, ChatModel
from openai_chat.endpoint.openai_settings import get_openai_settings
from utils.utils import configure_logging, count_history_tokens

configure_logging()
settings = get_openai_settings()

# Интерфейс держит не больше одного контроллера, а тот не больше одной сессии
if "chat" not in st.session_state:
    st.session_state.chat = ChatController(settings)
chat: ChatController = st.session_state.chat

st.title("💬 ChatGPT")

model_opts = [m.value for m in ChatModel.selectable()]
try:
    model_idx = model_opts.index(settings.default_model)
except ValueError:
    model_idx = 0
model_choice = st.selectbox("Модель GPT:", model_opts, index=model_idx)

system_prompt = st.text_area("Системное сообщение", value=settings.default_system_prompt)
api_key = st.text_input("Ваш API-ключ", value=settings.placeholder_api_key)

start_col, end_col, clear_col = st.columns(3)
if start_col.button("▶️ Начать чат"):
    chat.start(api_key, ChatModel.from_wire(model_choice), system_prompt)
if end_col.button("⏹️ Завершить чат"):
    chat.end()
if clear_col.button("🗑️ Очистить чат"):
    chat.clear()

st.divider()

max_tokens_response = st.slider(
    "Макс. токенов", MIN_MAX_TOKENS, MAX_MAX_TOKENS, settings.default_max_tokens
)

placeholder = "Отправьте сообщение..." if chat.session else "Нажмите «Начать чат», чтобы начать"
if prompt := st.chat_input(placeholder):
    model_name = chat.session.model_id if chat.session else model_choice
    with st.spinner(f"Получаем ответ от {model_name}..."):
        chat.send(prompt, max_tokens_response)

transcript = chat.transcript()
for msg in chat.chat_view():
    st.text(f"{msg.role.value:<9}: {msg.content}")

if chat.session:
    st.caption(
        f"Модель: {chat.session.model_id} | Сообщений: {len(transcript)} | "
        f"Токенов в контексте: ~{count_history_tokens(transcript)}"
    )
