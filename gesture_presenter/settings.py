"""
Settings Panel - Pairing code and orientation settings edited from the preview window.

The panel is driven by OpenCV key codes. While it is visible, gestures are
not sent.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

MAX_CODE_LENGTH = 32

KEY_TAB = 9
KEY_ENTER = (10, 13)
KEY_ESC = 27
KEY_BACKSPACE = (8, 127)


class SettingsPanel:
    """
    Settings state shown as an overlay on the preview.

    Keys while visible:
    - letters/digits: edit the pairing code
    - Backspace: delete last character
    - Tab: toggle the flipped orientation
    - Enter: save the code and close
    - Esc: close without saving the code
    """

    def __init__(self, pairing_code: str = "", flipped: bool = False):
        self.pairing_code = pairing_code.strip()
        self.flipped = flipped
        self.visible = False
        self.draft = ""

    @property
    def can_notify(self) -> bool:
        """Gestures may be sent only with a pairing code and the panel closed."""
        return bool(self.pairing_code) and not self.visible

    def open(self, reason: Optional[str] = None) -> None:
        if not self.visible:
            logger.info(f"Settings opened{f' ({reason})' if reason else ''}")
        self.visible = True
        self.draft = self.pairing_code

    def close(self) -> None:
        self.visible = False
        self.draft = ""

    def toggle_flipped(self) -> None:
        self.flipped = not self.flipped
        logger.info(f"Orientation {'flipped' if self.flipped else 'normal'}")

    def handle_key(self, key: int) -> bool:
        """
        Apply one key press.

        Args:
            key: Key code from cv2.waitKey (masked to 0-255)

        Returns:
            True if the panel consumed the key
        """
        if not self.visible or key < 0:
            return False

        if key in KEY_ENTER:
            self.pairing_code = self.draft.strip()
            logger.info(f"Pairing code set to {self.pairing_code!r}")
            self.close()
        elif key == KEY_ESC:
            self.close()
        elif key in KEY_BACKSPACE:
            self.draft = self.draft[:-1]
        elif key == KEY_TAB:
            self.toggle_flipped()
        elif chr(key).isascii() and chr(key).isalnum():
            if len(self.draft) < MAX_CODE_LENGTH:
                self.draft += chr(key)
        else:
            return False
        return True
