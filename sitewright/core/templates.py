# sitewright/core/templates.py
from __future__ import annotations

import textwrap
from typing import Dict

from sitewright.models.file_tree import FileSystemTree, write_file

STARTER_FILES: Dict[str, str] = {
    "package.json": textwrap.dedent(
        """
        {
          "name": "vite-react-typescript-starter",
          "private": true,
          "version": "0.0.0",
          "type": "module",
          "scripts": {
            "dev": "vite",
            "build": "vite build",
            "preview": "vite preview"
          },
          "dependencies": {
            "react": "^18.3.1",
            "react-dom": "^18.3.1"
          },
          "devDependencies": {
            "@types/react": "^18.3.5",
            "@types/react-dom": "^18.3.0",
            "@vitejs/plugin-react": "^4.3.1",
            "autoprefixer": "^10.4.18",
            "postcss": "^8.4.35",
            "tailwindcss": "^3.4.1",
            "typescript": "^5.5.3",
            "vite": "^5.4.2"
          }
        }
        """
    ).lstrip(),
    "index.html": textwrap.dedent(
        """
        <!doctype html>
        <html lang="en">
          <head>
            <meta charset="UTF-8" />
            <meta name="viewport" content="width=device-width, initial-scale=1.0" />
            <title>Vite + React + TS</title>
          </head>
          <body>
            <div id="root"></div>
            <script type="module" src="/src/main.tsx"></script>
          </body>
        </html>
        """
    ).lstrip(),
    "vite.config.ts": textwrap.dedent(
        """
        import { defineConfig } from 'vite';
        import react from '@vitejs/plugin-react';

        export default defineConfig({
          plugins: [react()],
        });
        """
    ).lstrip(),
    "tailwind.config.js": textwrap.dedent(
        """
        /** @type {import('tailwindcss').Config} */
        export default {
          content: ['./index.html', './src/**/*.{js,ts,jsx,tsx}'],
          theme: {
            extend: {},
          },
          plugins: [],
        };
        """
    ).lstrip(),
    "postcss.config.js": textwrap.dedent(
        """
        export default {
          plugins: {
            tailwindcss: {},
            autoprefixer: {},
          },
        };
        """
    ).lstrip(),
    "tsconfig.json": textwrap.dedent(
        """
        {
          "compilerOptions": {
            "target": "ES2020",
            "lib": ["ES2020", "DOM", "DOM.Iterable"],
            "module": "ESNext",
            "skipLibCheck": true,
            "moduleResolution": "bundler",
            "allowImportingTsExtensions": true,
            "isolatedModules": true,
            "noEmit": true,
            "jsx": "react-jsx",
            "strict": true
          },
          "include": ["src"]
        }
        """
    ).lstrip(),
    "src/vite-env.d.ts": '/// <reference types="vite/client" />\n',
    "src/index.css": "@tailwind base;\n@tailwind components;\n@tailwind utilities;\n",
    "src/main.tsx": textwrap.dedent(
        """
        import { StrictMode } from 'react';
        import { createRoot } from 'react-dom/client';
        import App from './App.tsx';
        import './index.css';

        createRoot(document.getElementById('root')!).render(
          <StrictMode>
            <App />
          </StrictMode>
        );
        """
    ).lstrip(),
    "src/App.tsx": textwrap.dedent(
        """
        function App() {
          return <div></div>;
        }

        export default App;
        """
    ).lstrip(),
}


def starter_files() -> FileSystemTree:
    tree = FileSystemTree()
    for path, contents in STARTER_FILES.items():
        write_file(tree, path, contents)
    return tree
