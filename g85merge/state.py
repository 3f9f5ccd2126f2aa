"""
State Management Module.
Implements the 'Store' pattern to unify access to Streamlit's session state.
"""
import streamlit as st
from dataclasses import dataclass
from typing import Optional, List
from g85merge.core.models import WaferMap
from g85merge.enums import MergeMode

@dataclass
class SessionStore:
    """
    Centralized store for application state.
    Wraps st.session_state to provide typed access and centralized modification logic.
    """

    def __post_init__(self):
        """Initialize default state values if they don't exist."""
        defaults = {
            'input_maps': [],
            'input_names': [],
            'is_sample': False,
            'merge_mode': MergeMode.PAIRWISE.value,
            'merged_map': None,
            'merged_text': None,
            'merged_filename': None,
            'report_bytes': None,
            'merge_error': None,
            'ingestion_messages': [],
        }

        for key, value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = value

    # --- Properties for Typed Access ---

    @property
    def input_maps(self) -> List[WaferMap]:
        return st.session_state.input_maps

    @input_maps.setter
    def input_maps(self, maps: List[WaferMap]):
        st.session_state.input_maps = maps

    @property
    def input_names(self) -> List[str]:
        return st.session_state.input_names

    @input_names.setter
    def input_names(self, names: List[str]):
        st.session_state.input_names = names

    @property
    def is_sample(self) -> bool:
        return st.session_state.is_sample

    @is_sample.setter
    def is_sample(self, val: bool):
        st.session_state.is_sample = val

    @property
    def merge_mode(self) -> MergeMode:
        return MergeMode(st.session_state.merge_mode)

    @merge_mode.setter
    def merge_mode(self, mode: MergeMode):
        st.session_state.merge_mode = mode.value

    @property
    def merged_map(self) -> Optional[WaferMap]:
        return st.session_state.merged_map

    @property
    def merged_text(self) -> Optional[str]:
        return st.session_state.merged_text

    @property
    def merged_filename(self) -> Optional[str]:
        return st.session_state.merged_filename

    @property
    def report_bytes(self) -> Optional[bytes]:
        return st.session_state.report_bytes

    @report_bytes.setter
    def report_bytes(self, val: Optional[bytes]):
        st.session_state.report_bytes = val

    @property
    def merge_error(self) -> Optional[str]:
        return st.session_state.merge_error

    @merge_error.setter
    def merge_error(self, msg: Optional[str]):
        st.session_state.merge_error = msg

    @property
    def ingestion_messages(self) -> List[str]:
        return st.session_state.ingestion_messages

    @ingestion_messages.setter
    def ingestion_messages(self, messages: List[str]):
        st.session_state.ingestion_messages = messages

    # --- Actions ---

    def set_result(self, merged_map: WaferMap, merged_text: str, filename: str):
        """Stores a successful merge; any previous report or error is discarded."""
        st.session_state.merged_map = merged_map
        st.session_state.merged_text = merged_text
        st.session_state.merged_filename = filename
        st.session_state.report_bytes = None
        st.session_state.merge_error = None

    def clear_result(self):
        st.session_state.merged_map = None
        st.session_state.merged_text = None
        st.session_state.merged_filename = None
        st.session_state.report_bytes = None
