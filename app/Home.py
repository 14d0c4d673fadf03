import streamlit as st

st.set_page_config(page_title="Media Providers Playground", page_icon="🎙️", layout="wide")

st.title("🎙️ Media Providers Playground")
st.subheader("A Streamlit App")
st.write(
    """
Try the speech-to-text, text-to-speech and vision backends behind one set of contracts.
Open the **Playground** page, pick a provider, run a request and compare latencies.
"""
)

st.info("Go to **Playground** in the left sidebar to try a provider.")
