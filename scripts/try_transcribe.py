import asyncio
import os
import sys

# Add project root to path so we can import speaking_api
sys.path.append(os.getcwd())

from speaking_api.pipelines.speaking import AudioUpload, transcribe_audio
from speaking_api.services.errors import CoachError


async def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/try_transcribe.py path/to/recording.webm [language]")
        return

    file_path = sys.argv[1]
    language = sys.argv[2] if len(sys.argv) > 2 else "en"
    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found. Please provide a path to an audio file.")
        return

    print(f"Reading {file_path}...")
    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    print(f"Transcribing {len(audio_bytes)} bytes with OpenAI Whisper...")
    try:
        upload = AudioUpload(filename=os.path.basename(file_path), content=audio_bytes)
        result = await transcribe_audio(upload, language_code=language)

        print("\n--- Transcript Result ---")
        print(result.text)
        print("-------------------------")
        for word in result.words or []:
            print(f"{word.start:6.2f}-{word.end:6.2f}  {word.word}")

    except CoachError as e:
        print(f"\nTranscription Error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
