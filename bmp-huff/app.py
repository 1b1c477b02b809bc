# ----------------
# Importations
# ----------------
import os
import tempfile

import pandas as pd
import streamlit as st

from huff_errors import ContainerError
from huff_tree import tree_to_dot
from main import COMPRESSED_SUFFIX, DECOMPRESSED_SUFFIX, compress_file, decompress_file

# ------------------------
#   Streamlit App
# ------------------------
st.set_page_config(page_title="BMP Huffman Compressor", layout="centered")
st.title("BMP Huffman Compressor 🖼")

# ---------------------
#    Instructions
# ---------------------
st.subheader("1) Instructions")

st.markdown(f"""
*How to use this tool*

1. Upload a `.bmp` image or a `{COMPRESSED_SUFFIX}` file.
2. Choose **Compress** or **Decompress**.
3. Click *Process File* to start.
4. Download the result after processing.

The 54-byte BMP header is stored as-is; only the pixel data is Huffman coded.
""")
st.divider()


def timings_table(timings):
    return pd.DataFrame(list(timings.items()), columns=["Step", "Time (s)"])


# -------------------
# File Uploading
# -------------------
st.subheader("2) File Uploader")
uploaded_file = st.file_uploader("Upload a file", type=None)
if uploaded_file:
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        tmp.write(uploaded_file.read())
        tmp_path = tmp.name
    st.success(f"Uploaded file: {uploaded_file.name} ({os.path.getsize(tmp_path)} bytes)")

    default_action = "Decompress" if uploaded_file.name.endswith(COMPRESSED_SUFFIX) else "Compress"
    action = st.radio("**Choose Action**", ["Compress", "Decompress"],
                      index=0 if default_action == "Compress" else 1)
    out_path = tmp_path + (COMPRESSED_SUFFIX if action == "Compress" else DECOMPRESSED_SUFFIX)

    if st.button("Process File"):
        st.divider()
        try:
            with st.spinner(f"{action}ing file..."):
                if action == "Compress":
                    # ------------------
                    #  File Compression
                    # ------------------
                    try:
                        root, stats = compress_file(tmp_path, out_path)
                    except ValueError as e:
                        st.error(f"Error: {e}")
                    else:
                        st.subheader("3) Compression Summary")
                        col1, col2, col3 = st.columns(3)
                        col1.metric("**Original Size**", f"{stats['original_bytes']} bytes")
                        col2.metric("**Compressed Size**", f"{stats['compressed_bytes']} bytes")
                        space_saved = stats["space_saved_percent"]
                        if space_saved is None:
                            col3.metric("Space Saved", "N/A")
                            st.markdown("*Compression ratio: N/A (empty image data)*")
                        else:
                            col3.metric("Space Saved", f"{space_saved:.2f}%")
                            st.markdown(f"*Compression ratio: {stats['compression_ratio']:.4f}*")

                        st.markdown(f"*Unique symbols: {stats['unique_symbols']}*")
                        st.markdown(f"*Tree size: {stats['tree_bytes']} bytes*")
                        st.markdown(f"*Padding bits: {stats['pad_count']}*")

                        st.divider()
                        st.subheader("4) Processing Timings")
                        st.table(timings_table({
                            "Read File": stats["time_read"],
                            "Build Tree": stats["time_tree_build"],
                            "Make Codes": stats["time_codes"],
                            "Encode & Pack": stats["time_pack"],
                            "Write File": stats["time_write"],
                            "Total": stats["time_total"],
                        }))
                        st.divider()
                        st.subheader("5) Huffman Tree")
                        if root is not None:
                            st.graphviz_chart(tree_to_dot(root))
                        else:
                            st.info("No Huffman tree (empty image data).")
                else:
                    # ----------------------
                    # File Decompression
                    # ---------------------
                    try:
                        stats = decompress_file(tmp_path, out_path)
                    except ContainerError as e:
                        st.error(f"Corrupt compressed file: {e}")
                    else:
                        st.subheader("3) Decompression Report")
                        col1, col2, col3 = st.columns(3)
                        col1.metric("Compressed file size", f"{stats['compressed_size']} bytes")
                        col2.metric("Restored file size", f"{stats['restored_size']} bytes")
                        col3.metric("Tree leaves", f"{stats['tree_leaves']}")
                        st.divider()
                        st.subheader("4) Processing Timings")
                        st.table(timings_table({
                            "Read File": stats["time_read"],
                            "Rebuild Tree": stats["time_tree"],
                            "Decode": stats["time_decode"],
                            "Write File": stats["time_write"],
                            "Total": stats["time_total"],
                        }))

            if os.path.exists(out_path):
                with open(out_path, 'rb') as f:
                    # ------------------------
                    #   File Downloading
                    # ------------------------
                    st.divider()
                    st.subheader("Download Button")
                    st.info(f"Download your {action.lower()}ed file here.")
                    if action == "Compress":
                        file_name = uploaded_file.name + COMPRESSED_SUFFIX
                    else:
                        file_name = uploaded_file.name.replace(COMPRESSED_SUFFIX, "") + DECOMPRESSED_SUFFIX
                    st.download_button(
                        label=file_name,
                        data=f.read(),
                        file_name=file_name,
                        mime="application/octet-stream",
                    )
            else:
                st.info("No output file was produced. Check the message above.")

        finally:
            # cleanup
            for path in (tmp_path, out_path):
                if os.path.exists(path):
                    os.remove(path)
