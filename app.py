import base64
import time

import streamlit as st

from bytewise import reconstruct_text, select_participants, share_text
from image_utils import (
    create_preview_image,
    image_to_png_bytes,
    load_image,
    pixels_to_image,
    reconstruct_image,
    share_image,
)
from share_codec import load_shares, save_shares
from sss_core import ThresholdScheme
from sss_errors import SecretSharingError

# Set page configuration
st.set_page_config(
    page_title="Shamir's Secret Sharing Tool",
    page_icon="🔐",
    layout="wide",
)

st.markdown("""
<style>
    .stApp {
        max-width: 1200px;
        margin: 0 auto;
    }
    .info-box, .success-box, .error-box {
        color: white;
        padding: 1rem;
        border-radius: 5px;
        margin-bottom: 1rem;
    }
    .info-box { background-color: #8d99ae; }
    .success-box { background-color: #2b2d42; }
    .error-box { background-color: #ef233c; }
</style>
""", unsafe_allow_html=True)

# Results of the last operation, kept per browser session
for key, default in (("share_text", None), ("share_image", None), ("recovered", None)):
    if key not in st.session_state:
        st.session_state[key] = default


def message_box(kind, text):
    st.markdown(f'<div class="{kind}-box">{text}</div>', unsafe_allow_html=True)


def download_button(object_to_download, download_filename, button_text, mime="application/octet-stream"):
    """
    Generate a link to download the given object.

    Args:
        object_to_download: The object to be downloaded (str or bytes)
        download_filename: Filename to download as
        button_text: Text to display on the download button
        mime: MIME type of the payload

    Returns:
        HTML string containing the download link
    """
    if isinstance(object_to_download, str):
        object_to_download = object_to_download.encode("utf-8")
    b64 = base64.b64encode(object_to_download).decode()
    return (
        f'<a href="data:{mime};base64,{b64}" download="{download_filename}" '
        f'style="background-color:#d90429;color:white;padding:0.5rem 1rem;'
        f'border-radius:5px;text-decoration:none;">{button_text}</a>'
    )


def scheme_inputs(prefix):
    col1, col2 = st.columns(2)
    with col1:
        n = st.number_input("Total Number of Shares (n)", min_value=1, max_value=20,
                            value=5, step=1, key=f"{prefix}_n")
    with col2:
        k = st.number_input("Minimum Required Shares (k)", min_value=1, max_value=int(n),
                            value=min(3, int(n)), step=1, key=f"{prefix}_k")
    return ThresholdScheme(int(k), int(n))


st.title("🔐 Shamir's Secret Sharing Tool")
message_box("info", "Split a text or a grayscale image into n shares so that any k of them "
                    "reconstruct it, and fewer than k reveal nothing.")

tab_text, tab_image, tab_combine = st.tabs(
    ["📝 Share Text", "🖼️ Share Image", "🔄 Reconstruct"]
)

with tab_text:
    st.header("Share Text")
    secret = st.text_area("Secret text")
    scheme = scheme_inputs("text")

    if st.button("Create Text Shares", disabled=not secret):
        try:
            st.session_state.share_text = save_shares(share_text(secret, scheme))
            message_box("success", f"Generated {scheme.num_shares} shares for "
                                   f"{len(secret.encode('utf-8'))} bytes.")
        except SecretSharingError as e:
            message_box("error", f"Error: An issue occurred while generating shares: {e}")

    if st.session_state.share_text:
        st.markdown(download_button(st.session_state.share_text, "text_shares.txt",
                                    "Download Text Shares (.txt)", mime="text/plain"),
                    unsafe_allow_html=True)

with tab_image:
    st.header("Share Image")
    uploaded_file = st.file_uploader("Upload an image (JPG, PNG)", type=["jpg", "jpeg", "png"])

    if uploaded_file is not None:
        try:
            image = load_image(uploaded_file)
            st.image(image, caption="Uploaded Image", use_container_width=True)

            # Show a warning for large images
            if image.width * image.height > 500000:  # Roughly a 700x700 image
                message_box("error", "You have uploaded a large image! Processing may take a while.")

            scheme = scheme_inputs("image")
            if st.button("Encrypt and Create Shares"):
                with st.spinner("Processing image and generating shares..."):
                    progress_bar = st.progress(0.0)
                    secret_shares, width, height = share_image(
                        image, scheme, progress_callback=lambda p: progress_bar.progress(p)
                    )
                    st.session_state.share_image = save_shares(secret_shares, width, height)
                    time.sleep(0.5)  # Give a moment to see 100%

                message_box("success", "Success! Shares have been generated.")
                st.subheader("Share Previews")
                cols = st.columns(min(3, scheme.num_shares))
                for x in range(1, scheme.num_shares + 1):
                    with cols[(x - 1) % len(cols)]:
                        preview = create_preview_image(secret_shares, width, height, x)
                        st.image(preview, caption=f"Share {x}", use_container_width=True)
        except (SecretSharingError, OSError) as e:
            message_box("error", f"Error: An issue occurred while processing the image: {e}")

    if st.session_state.share_image:
        st.markdown(download_button(st.session_state.share_image, "image_shares.txt",
                                    "Download Image Shares (.txt)", mime="text/plain"),
                    unsafe_allow_html=True)

with tab_combine:
    st.header("Reconstruct Secret")
    message_box("info", "Upload a share file and enter the threshold used when it was created. "
                        "Optionally pick which participants' shares to combine.")

    uploaded_shares = st.file_uploader("Upload Share File", type=["txt"])
    if uploaded_shares is not None:
        col1, col2 = st.columns(2)
        with col1:
            k = st.number_input("Threshold (k)", min_value=1, value=3, step=1, key="combine_k")
        with col2:
            use = st.text_input("Participants (e.g. 1,3,5; empty uses the first k)")

        if st.button("Combine and Show Secret"):
            try:
                secret_shares, width, height = load_shares(uploaded_shares.getvalue().decode("utf-8"))
                if use.strip():
                    xs = [int(part) for part in use.split(",") if part.strip()]
                    secret_shares = select_participants(secret_shares, xs)
                n = max([int(k)] + [len(shares) for shares in secret_shares])
                scheme = ThresholdScheme(int(k), n)

                if width is None:
                    st.session_state.recovered = ("text", reconstruct_text(secret_shares, scheme))
                else:
                    with st.spinner("Combining shares..."):
                        progress_bar = st.progress(0.0)
                        pixels = reconstruct_image(
                            secret_shares, width, height, scheme,
                            progress_callback=lambda p: progress_bar.progress(p),
                        )
                    st.session_state.recovered = ("image", pixels_to_image(pixels))
                message_box("success", "Combine successful! The secret has been reconstructed.")
            except ValueError as e:  # SecretSharingError, bad participant list, bad encoding
                st.session_state.recovered = None
                message_box("error", f"Error: An issue occurred while combining shares: {e}")

    if st.session_state.recovered:
        kind, value = st.session_state.recovered
        if kind == "text":
            st.code(value)
        else:
            st.image(value, caption="Reconstructed Image", use_container_width=True)
            st.markdown(download_button(image_to_png_bytes(value), "recovered_image.png",
                                        "Download Original Image (.png)", mime="image/png"),
                        unsafe_allow_html=True)

st.markdown("""
---
<p style="text-align: center; color: #8d99ae;">
Shamir's Secret Sharing Text/Image Tool © 2025
</p>
""", unsafe_allow_html=True)
