"""Serial port listing with USB details and device id parsing."""