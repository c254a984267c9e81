# TDX Feedback App
