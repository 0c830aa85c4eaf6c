from voice_relay.core.classifier import IntentClassifier
from voice_relay.core.dispatcher import Dispatcher, MockDispatcher, WebhookDispatcher, build_dispatcher
from voice_relay.core.relay import VoiceRelay
from voice_relay.core.synthesizer import SpeechSynthesizer
from voice_relay.core.transcriber import WhisperTranscriber
from voice_relay.core.types import AudioUpload, IntentAction
