"""Audio capture and the recording session state machine."""
