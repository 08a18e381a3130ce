"""Built-in presets seeded into an empty preset store."""

DEFAULT_PRESETS: dict[str, dict] = {
    "VideoEdit 1": {
        "kind": "standard",
        "name": "VideoEdit 1",
        "description": "Default video editing configuration",
        "segments": [
            {
                "type": "video",
                "source": "Money Videos",
                "duration": 2.3,
                "extensions": [".mp4", ".mov"],
            },
            {
                "type": "image",
                "source": "Manualcaja",
                "duration": 1.3,
                "extensions": [".jpg", ".jpeg", ".png"],
            },
            {
                "type": "image",
                "source": "papolshot",
                "duration": 0.7,
                "extensions": [".jpg", ".jpeg", ".png"],
            },
            {
                "type": "image",
                "source": "papolshot",
                "duration": 0.5,
                "extensions": [".jpg", ".jpeg", ".png"],
            },
        ],
        "endVideos": {
            "source": "lucuryvids/Luxury Views",
            "count": 9,
            "duration": 0.3778,
            "extensions": [".mp4", ".mov"],
        },
        "outroVideo": {
            "source": "discordoutro",
            "duration": 1.6,
            "extensions": [".mp4", ".mov"],
        },
        "audio": {"source": "music", "duration": 10.6, "extensions": [".mp3", ".wav"]},
        "textOverlays": [
            {
                "text": "Wanna learn how to make a bank",
                "startTime": 0,
                "endTime": 2.3,
                "x": "center",
                "y": 180,
                "fontSize": 70,
                "color": "white",
                "borderColor": "black",
                "borderWidth": 6,
            },
            {
                "text": "Pretend to be a girl online",
                "startTime": 2.3,
                "endTime": 3.6,
                "x": "center",
                "y": "h-300",
                "fontSize": 70,
                "color": "white",
                "borderColor": "black",
                "borderWidth": 6,
            },
            {
                "text": "Rince and Repeat",
                "startTime": 3.6,
                "endTime": 4.8,
                "x": "center",
                "y": "h/2+50",
                "fontSize": 70,
                "color": "white",
                "borderColor": "black",
                "borderWidth": 6,
                "box": True,
                "boxColor": "black@1.0",
                "boxBorderWidth": 10,
            },
            {
                "text": "Enjoy Your New LifeStyle",
                "startTime": 4.8,
                "endTime": 8.2,
                "x": "center",
                "y": 240,
                "fontSize": 70,
                "color": "white",
                "borderColor": "black",
                "borderWidth": 6,
            },
        ],
        "output": {
            "resolution": "1080x1920",
            "fps": 25,
            "codec": "libx264",
            "preset": "fast",
            "crf": 23,
            "audioCodec": "aac",
            "audioBitrate": "192k",
        },
    },
    "tiktok_iphone13_europe": {
        "kind": "short_form",
        "name": "tiktok_iphone13_europe",
        "source": {"video": "tiktokvideos", "images": "tiktokimages"},
        "overlays": [
            {"startTime": 1.2, "endTime": 1.3, "opacity": 0.5},
            {"startTime": 2.7, "endTime": 2.9, "opacity": 0.5},
        ],
        "metadata": {"device": "iPhone 13", "region": "Europe", "platform": "none"},
        "output": {
            "resolution": "1080x1920",
            "fps": 30,
            "codec": "libx264",
            "videoBitrate": "12M",
            "audioCodec": "aac",
            "audioBitrate": "192k",
            "faststart": True,
        },
    },
}
