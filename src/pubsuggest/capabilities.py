"""Known public symbols for popular packages, keyed by package name.

Extending this table is a data change: add an entry, nothing else.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

KNOWN_CAPABILITIES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "http": ("get", "post", "put", "delete", "Client", "Response"),
        "dio": ("Dio", "BaseOptions", "Response", "Interceptor", "DioException"),
        "provider": ("Provider", "ChangeNotifierProvider", "Consumer", "MultiProvider"),
        "flutter_bloc": ("BlocProvider", "BlocBuilder", "BlocListener", "Cubit", "Bloc"),
        "bloc": ("Bloc", "Cubit", "Emitter", "BlocObserver"),
        "riverpod": ("Provider", "StateProvider", "FutureProvider", "Ref"),
        "flutter_riverpod": ("ProviderScope", "ConsumerWidget", "WidgetRef", "Consumer"),
        "get": ("Get", "GetMaterialApp", "Obx", "GetxController"),
        "shared_preferences": ("SharedPreferences",),
        "path_provider": (
            "getApplicationDocumentsDirectory",
            "getTemporaryDirectory",
            "getApplicationSupportDirectory",
        ),
        "sqflite": ("openDatabase", "Database", "getDatabasesPath"),
        "hive": ("Hive", "Box", "HiveObject", "TypeAdapter"),
        "url_launcher": ("launchUrl", "canLaunchUrl", "LaunchMode"),
        "intl": ("DateFormat", "NumberFormat", "Intl"),
        "equatable": ("Equatable", "EquatableMixin"),
        "json_annotation": ("JsonSerializable", "JsonKey"),
        "go_router": ("GoRouter", "GoRoute", "ShellRoute", "GoRouterState"),
        "cached_network_image": ("CachedNetworkImage", "CachedNetworkImageProvider"),
        "image_picker": ("ImagePicker", "XFile", "ImageSource"),
        "firebase_core": ("Firebase", "FirebaseOptions"),
        "cloud_firestore": ("FirebaseFirestore", "DocumentSnapshot", "QuerySnapshot"),
        "rxdart": ("BehaviorSubject", "PublishSubject", "ReplaySubject", "Rx"),
        "uuid": ("Uuid",),
        "logger": ("Logger", "Level", "PrettyPrinter"),
        "collection": ("ListEquality", "DeepCollectionEquality", "IterableExtension"),
    }
)


def capabilities_for(package_name: str) -> tuple[str, ...]:
    return KNOWN_CAPABILITIES.get(package_name.lower(), ())
